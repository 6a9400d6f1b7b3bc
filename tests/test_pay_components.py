"""Tests for per-worker pay components."""

from decimal import Decimal

import pytest

from event_payroll.calculators.pay_components import (
    compute_pay_components,
    normalize_state_code,
    regime_for_state,
    rest_break_amount,
)
from event_payroll.calculators.types import PayInput, PayRegime


def standard(**overrides) -> PayInput:
    values = dict(
        regime=PayRegime.STANDARD,
        state_code="CA",
        actual_hours=Decimal("8"),
        base_rate=Decimal("17.28"),
    )
    values.update(overrides)
    return PayInput(**values)


def weekly(**overrides) -> PayInput:
    values = dict(
        regime=PayRegime.WEEKLY_OVERTIME,
        state_code="AZ",
        actual_hours=Decimal("8"),
        base_rate=Decimal("14.70"),
    )
    values.update(overrides)
    return PayInput(**values)


class TestStateRegime:
    """Test state code normalization and regime selection."""

    def test_full_names_map_to_codes(self):
        assert normalize_state_code("California") == "CA"
        assert normalize_state_code(" new york ") == "NY"

    def test_blank_state_defaults_to_california(self):
        assert normalize_state_code(None) == "CA"
        assert normalize_state_code("  ") == "CA"

    def test_weekly_overtime_states(self):
        """AZ and NY use weekly overtime; everything else is standard."""
        assert regime_for_state("AZ") is PayRegime.WEEKLY_OVERTIME
        assert regime_for_state("ny") is PayRegime.WEEKLY_OVERTIME
        assert regime_for_state("CA") is PayRegime.STANDARD
        assert regime_for_state("NV") is PayRegime.STANDARD
        assert regime_for_state("TX") is PayRegime.STANDARD


class TestRestBreak:
    """Test the flat rest break premium."""

    @pytest.mark.parametrize(
        "hours,expected",
        [
            (Decimal("0"), Decimal("0")),
            (Decimal("0.5"), Decimal("9")),
            (Decimal("9.99"), Decimal("9")),
            (Decimal("10"), Decimal("12")),
            (Decimal("14"), Decimal("12")),
        ],
    )
    def test_amount_by_hours(self, hours, expected):
        assert rest_break_amount(hours, "CA") == expected

    @pytest.mark.parametrize("state", ["NV", "WI", "AZ", "NY", "Nevada"])
    def test_no_rest_break_states(self, state):
        """Some states never pay the premium."""
        assert rest_break_amount(Decimal("12"), state) == Decimal("0")


class TestStandardRegime:
    """Test the standard regime formulas."""

    def test_share_below_extended_amount(self):
        """8h at 17.28 with a 200 share: commission is dropped."""
        pay = compute_pay_components(standard(commission_share=Decimal("200")))

        assert pay.ext_amt_on_reg_rate == Decimal("207.36")
        assert pay.commission_amt == Decimal("0")
        assert pay.total_final_commission_amt == Decimal("207.36")
        assert pay.loaded_rate == Decimal("25.92")
        assert pay.rest_break == Decimal("9")
        assert pay.total_gross_pay == Decimal("216.36")

    def test_partial_commission_is_zeroed(self):
        """A surplus smaller than the extended amount counts for nothing."""
        pay = compute_pay_components(standard(commission_share=Decimal("300")))

        # 300 - 207.36 = 92.64, still below 207.36
        assert pay.commission_amt == Decimal("0")
        assert pay.total_final_commission_amt == Decimal("207.36")

    def test_large_share_pays_surplus(self):
        """A surplus at least the extended amount is paid in full."""
        pay = compute_pay_components(standard(commission_share=Decimal("500")))

        assert pay.commission_amt == Decimal("292.64")
        assert pay.total_final_commission_amt == Decimal("500.00")
        assert pay.loaded_rate == Decimal("62.5")

    def test_minimum_event_pay_floor(self):
        """Short shifts are floored at 150."""
        pay = compute_pay_components(standard(actual_hours=Decimal("2")))

        assert pay.ext_amt_on_reg_rate == Decimal("51.84")
        assert pay.total_final_commission_amt == Decimal("150")
        assert pay.loaded_rate == Decimal("75")

    def test_zero_hours(self):
        """No hours means no pay beyond adjustments and tips."""
        pay = compute_pay_components(
            standard(
                actual_hours=Decimal("0"),
                commission_share=Decimal("500"),
                other_adjustment=Decimal("20"),
            )
        )

        assert pay.commission_amt == Decimal("0")
        assert pay.total_final_commission_amt == Decimal("0")
        assert pay.loaded_rate == Decimal("17.28")
        assert pay.rest_break == Decimal("0")
        assert pay.total_gross_pay == Decimal("20")

    def test_ineligible_worker_gets_no_commission(self):
        """Trailers never receive commission even with a share passed in."""
        pay = compute_pay_components(
            standard(commission_share=Decimal("1000"), commission_eligible=False)
        )
        assert pay.commission_amt == Decimal("0")

    def test_long_shift_rest_break(self):
        pay = compute_pay_components(standard(actual_hours=Decimal("10")))
        assert pay.rest_break == Decimal("12")

    def test_standard_never_weekly_overtime(self):
        """Prior hours have no effect in the standard regime."""
        pay = compute_pay_components(standard(prior_week_hours=Decimal("60")))

        assert pay.is_weekly_overtime is False
        assert pay.ot_rate == Decimal("0")


class TestWeeklyOvertimeRegime:
    """Test the weekly-overtime regime formulas."""

    def test_over_forty_hours_pays_ot_rate(self):
        """35 prior + 8 event hours crosses 40: the whole event is paid at OT."""
        pay = compute_pay_components(
            weekly(prior_week_hours=Decimal("35"), commission_share=Decimal("100"))
        )

        assert pay.is_weekly_overtime is True
        assert pay.commission_amt == Decimal("100")
        # (8 * 14.70 + 100) / 8
        assert pay.loaded_rate == Decimal("27.2")
        assert pay.ot_rate == Decimal("40.8")
        assert pay.ext_amt_on_reg_rate == Decimal("326.4")
        assert pay.total_final_commission_amt == Decimal("326.4")
        assert pay.rest_break == Decimal("0")
        assert pay.total_gross_pay == Decimal("326.4")

    def test_under_forty_hours(self):
        """Without overtime, pay is the base amount plus commission."""
        pay = compute_pay_components(weekly(commission_share=Decimal("100")))

        assert pay.is_weekly_overtime is False
        assert pay.ext_amt_on_reg_rate == Decimal("117.6")
        assert pay.total_final_commission_amt == Decimal("217.6")
        assert pay.ot_rate == Decimal("0")

    def test_floor_applies_before_overtime(self):
        """The OT rate is built on the floored amount."""
        pay = compute_pay_components(
            weekly(actual_hours=Decimal("4"), prior_week_hours=Decimal("38"))
        )

        assert pay.loaded_rate == Decimal("37.5")
        assert pay.ot_rate == Decimal("56.25")
        assert pay.total_final_commission_amt == Decimal("225")

    def test_no_rest_break(self):
        pay = compute_pay_components(weekly(actual_hours=Decimal("12")))
        assert pay.rest_break == Decimal("0")

    def test_zero_hours_not_overtime(self):
        """A worker with no hours is never in overtime."""
        pay = compute_pay_components(
            weekly(actual_hours=Decimal("0"), prior_week_hours=Decimal("50"))
        )

        assert pay.is_weekly_overtime is False
        assert pay.total_final_commission_amt == Decimal("0")


class TestCommonTail:
    """Test tips and gross pay assembly shared by both regimes."""

    def test_tips_prorated_by_hours(self):
        pay = compute_pay_components(
            standard(total_event_tips=Decimal("300"), total_event_hours=Decimal("24"))
        )
        assert pay.tips == Decimal("100")

    def test_explicit_tips_without_event_hours(self):
        """With no event hours the worker's own tip value is used."""
        pay = compute_pay_components(
            standard(
                actual_hours=Decimal("0"),
                total_event_tips=Decimal("300"),
                total_event_hours=Decimal("0"),
                explicit_tips=Decimal("15"),
            )
        )
        assert pay.tips == Decimal("15")

    def test_gross_pay_sums_components(self):
        pay = compute_pay_components(
            standard(
                commission_share=Decimal("200"),
                total_event_tips=Decimal("80"),
                total_event_hours=Decimal("16"),
                other_adjustment=Decimal("-10"),
            )
        )

        assert pay.tips == Decimal("40")
        assert pay.total_gross_pay == (
            pay.total_final_commission_amt + pay.tips + pay.rest_break + pay.other_adjustment
        )
        assert pay.total_gross_pay == Decimal("246.36")

    def test_to_dict_uses_regime_value(self):
        pay = compute_pay_components(standard())
        assert pay.to_dict()["regime"] == "standard"
