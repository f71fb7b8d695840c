"""
Effets de bord posés sur l'hôte pendant que le widget de paiement est ouvert
(verrou de défilement, piège de focus, calque). Acquis ensemble, libérés ensemble
par un disposer unique, dans l'ordre inverse.
"""
from dataclasses import dataclass
from typing import Callable, Iterable, List, Protocol
import logging

logger = logging.getLogger(__name__)

Disposer = Callable[[], None]


class HostEffect(Protocol):
    name: str

    def apply(self) -> None: ...
    def revert(self) -> None: ...


@dataclass
class HostSurface:
    """État observable de l'hôte (l'UI le lit pour se rendre)."""
    scroll_locked: bool = False
    focus_trapped: bool = False
    overlay_visible: bool = False


class SurfaceFlag:
    """Passe un attribut booléen de la surface à True, puis restaure sa valeur d'origine."""

    def __init__(self, surface: HostSurface, attribute: str):
        self.name = attribute
        self._surface = surface
        self._previous = getattr(surface, attribute)

    def apply(self) -> None:
        self._previous = getattr(self._surface, self.name)
        setattr(self._surface, self.name, True)

    def revert(self) -> None:
        setattr(self._surface, self.name, self._previous)


class GatewayHostEnvironment:
    def __init__(self, effects: Iterable[HostEffect]):
        self._effects: List[HostEffect] = list(effects)

    @classmethod
    def for_surface(cls, surface: HostSurface) -> "GatewayHostEnvironment":
        return cls([
            SurfaceFlag(surface, "scroll_locked"),
            SurfaceFlag(surface, "focus_trapped"),
            SurfaceFlag(surface, "overlay_visible"),
        ])

    def acquire(self) -> Disposer:
        applied: List[HostEffect] = []
        try:
            for effect in self._effects:
                effect.apply()
                applied.append(effect)
        except Exception:
            _revert_all(applied)
            raise

        released = False

        def dispose() -> None:
            nonlocal released
            if released:
                return
            released = True
            _revert_all(applied)

        return dispose


def _revert_all(applied: List[HostEffect]) -> None:
    for effect in reversed(applied):
        try:
            effect.revert()
        except Exception:
            logger.exception("payments.host.revert failed effect=%s", getattr(effect, "name", effect))
