import pytest

from storefront.payments.host import GatewayHostEnvironment, HostSurface


class _Recorder:
    def __init__(self, name, log, fail_apply=False):
        self.name = name
        self.log = log
        self.fail_apply = fail_apply

    def apply(self):
        if self.fail_apply:
            raise RuntimeError("cannot apply")
        self.log.append(f"apply:{self.name}")

    def revert(self):
        self.log.append(f"revert:{self.name}")


def test_surface_flags_set_and_restored():
    surface = HostSurface()
    dispose = GatewayHostEnvironment.for_surface(surface).acquire()
    assert surface.scroll_locked and surface.focus_trapped and surface.overlay_visible
    dispose()
    assert surface == HostSurface()


def test_dispose_reverts_in_reverse_order_exactly_once():
    log = []
    env = GatewayHostEnvironment([_Recorder("scroll", log), _Recorder("focus", log)])
    dispose = env.acquire()
    dispose()
    dispose()
    assert log == ["apply:scroll", "apply:focus", "revert:focus", "revert:scroll"]


def test_partial_acquire_is_rolled_back():
    log = []
    env = GatewayHostEnvironment([_Recorder("scroll", log), _Recorder("focus", log, fail_apply=True)])
    with pytest.raises(RuntimeError):
        env.acquire()
    assert log == ["apply:scroll", "revert:scroll"]


def test_pre_existing_flag_is_preserved():
    surface = HostSurface(scroll_locked=True)
    dispose = GatewayHostEnvironment.for_surface(surface).acquire()
    dispose()
    assert surface.scroll_locked is True
    assert surface.overlay_visible is False
