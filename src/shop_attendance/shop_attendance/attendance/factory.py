from __future__ import annotations

from typing import Mapping, Optional

from ..core.enums import Channel
from .strategies.base import AdmissionStrategy
from .strategies.remote_gps_strategy import RemoteGpsStrategy
from .strategies.strict_radius_strategy import StrictRadiusStrategy


class AdmissionPolicyFactory:
    """Factory Pattern: one admission strategy per channel.

    New channels are registered here; the toggle service only asks for
    ``for_channel``.
    """

    def __init__(self, strategies: Optional[Mapping[Channel, AdmissionStrategy]] = None):
        if strategies is None:
            strict = StrictRadiusStrategy()
            strategies = {
                Channel.TAG: strict,
                Channel.CODE: strict,
                Channel.TERMINAL: strict,
                Channel.GPS: RemoteGpsStrategy(),
            }
        self._strategies: dict[Channel, AdmissionStrategy] = dict(strategies)

    def register(self, channel: Channel, strategy: AdmissionStrategy) -> None:
        self._strategies[channel] = strategy

    def for_channel(self, channel: Channel) -> AdmissionStrategy:
        try:
            return self._strategies[channel]
        except KeyError:
            raise LookupError(f"No admission strategy registered for channel {channel.value!r}") from None
