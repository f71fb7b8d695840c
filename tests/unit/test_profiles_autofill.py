import pytest

from storefront.auth.identity import Identity
from storefront.checkout.models import ShippingDetails
from storefront.data.repository import RepositoryError
from storefront.profiles.service import ProfileAutofillService

IDENTITY = Identity(id="u1", email="asha@example.com", name="Asha Rao", phone="9876543210")


@pytest.mark.asyncio
async def test_saved_profile_wins(autofill_service, data_repo):
    data_repo.collections["user_profiles"] = [{
        "id": "p1", "user_id": "u1", "name": "Asha R", "email": "asha@example.com", "phone": "9876500000",
        "address": {"street": "12 MG Road", "city": "Bengaluru", "state": "Karnataka", "pincode": "560001"},
        "landmark": "Near metro",
    }]
    result = await autofill_service.autofill(IDENTITY)
    assert result.source == "profile"
    assert result.details.full_name == "Asha R"
    assert result.details.address_line == "12 MG Road"
    assert result.details.landmark == "Near metro"


@pytest.mark.asyncio
async def test_past_order_used_and_backfills_profile(autofill_service, data_repo):
    data_repo.collections["orders"] = [{
        "id": "o1", "customer_email": "asha@example.com", "created_at": "2023-01-01T00:00:00+00:00",
        "shipping_address": {"name": "Asha Rao", "phone": "9876543210", "street": "5 Park Street",
                             "city": "Kolkata", "state": "WB", "pincode": "700016"},
    }]
    result = await autofill_service.autofill(IDENTITY)
    assert result.source == "past_order"
    assert result.details.address_line == "5 Park Street"
    assert result.details.email == "asha@example.com"

    profiles = data_repo.collections["user_profiles"]
    assert len(profiles) == 1
    assert profiles[0]["user_id"] == "u1"
    assert profiles[0]["address"]["city"] == "Kolkata"


@pytest.mark.asyncio
async def test_identity_fields_then_blank(autofill_service):
    result = await autofill_service.autofill(IDENTITY)
    assert result.source == "identity"
    assert (result.details.full_name, result.details.phone) == ("Asha Rao", "9876543210")

    blank = await ProfileAutofillService(autofill_service._profiles, []).autofill(IDENTITY)
    assert blank.source is None
    assert blank.details.email == "asha@example.com"
    assert blank.details.address_line == ""


@pytest.mark.asyncio
async def test_failing_strategy_is_skipped(profile_repo):
    class _Boom:
        name = "boom"

        async def lookup(self, identity):
            raise RuntimeError("down")

    class _Static:
        name = "static"

        async def lookup(self, identity):
            return ShippingDetails(full_name="From static")

    result = await ProfileAutofillService(profile_repo, [_Boom(), _Static()]).autofill(IDENTITY)
    assert result.source == "static"


@pytest.mark.asyncio
async def test_upsert_updates_existing_profile(autofill_service, data_repo):
    details = ShippingDetails(full_name="Asha Rao", email="asha@example.com", phone="9876543210",
                              address_line="12 MG Road", city="Bengaluru", state="KA", pincode="560001")
    assert await autofill_service.save(IDENTITY, details)
    assert await autofill_service.save(IDENTITY, details.model_copy(update={"city": "Mysuru"}))
    profiles = data_repo.collections["user_profiles"]
    assert len(profiles) == 1
    assert profiles[0]["address"]["city"] == "Mysuru"


@pytest.mark.asyncio
async def test_save_failure_is_reported_not_raised(autofill_service, data_repo):
    data_repo.fail_on["get_where"] = RepositoryError("timeout")
    details = ShippingDetails(full_name="Asha Rao")
    assert await autofill_service.save(IDENTITY, details) is False
