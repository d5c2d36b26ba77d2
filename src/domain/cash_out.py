from __future__ import annotations

from typing import Mapping

from domain.count_record import CountTotals, CountType
from domain.denominations import DenominationCount, DenominationKey, coerce_denominations, total_cents
from domain.drawer import DrawerNotFoundError, DrawerSettingsSource, TargetProfile


def compute_cash_out(current: DenominationCount, target: TargetProfile) -> DenominationCount:
    """Pieces to pull so that at most the target makeup stays in the drawer.

    Denominations below target are left alone; the shortfall is not reported here.
    """
    return DenominationCount.model_validate(
        {key.value: max(0, current.quantity(key) - target.quantity(key)) for key in DenominationKey}
    )


def compute_totals(
    denominations: DenominationCount | Mapping[str, int],
    target_profile: TargetProfile | Mapping[str, int],
    count_type: CountType | str,
) -> CountTotals:
    counts = coerce_denominations(denominations)
    target = coerce_denominations(target_profile)

    if CountType(count_type) is CountType.OPENING:
        # Nothing leaves the drawer when a shift starts.
        cash_out = DenominationCount.zero()
    else:
        cash_out = compute_cash_out(counts, target)

    total_cash_cents = total_cents(counts)
    return CountTotals(
        total_cash_cents=total_cash_cents,
        cash_out=cash_out,
        total_for_deposit_cents=total_cash_cents - total_cents(cash_out),
    )


class CashOutPolicy:
    def __init__(self, settings_source: DrawerSettingsSource) -> None:
        self._settings_source = settings_source

    def target_for(self, drawer_id: str) -> TargetProfile:
        settings = self._settings_source.get(drawer_id)
        if settings is None:
            raise DrawerNotFoundError(drawer_id=drawer_id)
        return settings.target_denominations

    def totals_for(
        self,
        drawer_id: str,
        count_type: CountType | str,
        denominations: DenominationCount | Mapping[str, int],
    ) -> CountTotals:
        return compute_totals(denominations, self.target_for(drawer_id), count_type)
