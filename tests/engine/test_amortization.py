from datetime import date
from decimal import Decimal

import pytest

from debtnote.engine.amortization import (
    check_product_limits,
    compute_amortization,
    declining_installment,
    maturity_date,
    net_disbursement,
    processing_fee,
    repayment_schedule,
    require_cents,
)
from debtnote.models.errors import InvalidInput
from debtnote.models.loan import InterestMethod, LoanTerms, ProductLimits


def _terms(principal="10000", rate="12", tenure=12, method="flat", **fees) -> LoanTerms:
    return LoanTerms(
        principal=Decimal(principal),
        annual_rate=Decimal(rate),
        tenure_months=tenure,
        method=method,
        **fees,
    )


class TestFlat:
    def test_one_year(self, flat_terms):
        result = compute_amortization(flat_terms)
        # 10,000 x 12 x 12 / 1200
        assert result.total_interest == Decimal("1200.00")
        assert result.total_amount == Decimal("11200.00")
        assert result.monthly_installment == Decimal("933.33")
        assert result.interest_rate == Decimal("12")

    def test_interest_ignores_repayments(self):
        # Same rate, double the tenure: interest doubles
        result = compute_amortization(_terms(tenure=24))
        assert result.total_interest == Decimal("2400.00")


class TestSimple:
    def test_two_years(self):
        result = compute_amortization(_terms(tenure=24, method="simple"))
        # years = 2; 10,000 x 12 x 2 / 100
        assert result.total_interest == Decimal("2400.00")
        assert result.total_amount == Decimal("12400.00")
        assert result.monthly_installment == Decimal("516.67")

    def test_partial_year(self):
        result = compute_amortization(_terms(tenure=6, method="simple"))
        assert result.total_interest == Decimal("600.00")
        assert result.monthly_installment == Decimal("1766.67")


class TestDeclining:
    def test_standard_annuity(self):
        """100K at 12% over 12 months: r = 1% per month."""
        result = compute_amortization(_terms(principal="100000", method="declining"))
        assert result.monthly_installment == Decimal("8884.88")
        assert result.total_interest == Decimal("6618.55")
        assert result.total_amount == Decimal("106618.55")

    def test_zero_rate(self):
        result = compute_amortization(_terms(principal="12000", rate="0", method="declining"))
        assert result.monthly_installment == Decimal("1000.00")
        assert result.total_interest == Decimal("0.00")
        assert result.total_amount == Decimal("12000.00")

    def test_zero_rate_installment_helper(self):
        assert declining_installment(Decimal("12000"), Decimal("0"), 12) == Decimal("1000")

    @pytest.mark.parametrize("principal,rate,tenure", [
        ("5000", "18", 6),
        ("25000", "9.5", 36),
        ("100000", "24", 60),
        ("7777.77", "3.25", 7),
    ])
    def test_installments_cover_total(self, principal, rate, tenure):
        result = compute_amortization(_terms(principal, rate, tenure, "declining"))
        gap = abs(result.monthly_installment * tenure - result.total_amount)
        assert gap <= Decimal("0.01") * tenure

    def test_declining_cheaper_than_flat(self):
        declining = compute_amortization(_terms(method="declining"))
        flat = compute_amortization(_terms(method="flat"))
        assert declining.total_interest < flat.total_interest


class TestTotalsReconcile:
    @pytest.mark.parametrize("method", ["declining", "flat", "simple"])
    @pytest.mark.parametrize("principal,rate,tenure", [
        ("10000", "12", 12),
        ("15333.33", "7.75", 18),
        ("999", "35", 5),
    ])
    def test_total_is_principal_plus_interest(self, method, principal, rate, tenure):
        result = compute_amortization(_terms(principal, rate, tenure, method))
        assert result.total_amount == Decimal(principal) + result.total_interest

    def test_outputs_are_cents(self):
        result = compute_amortization(_terms("15333.33", "7.75", 18, "declining"))
        for value in (result.total_interest, result.total_amount,
                      result.monthly_installment, result.processing_fee):
            assert value == value.quantize(Decimal("0.01"))

    def test_rounds_half_up(self):
        # 0.25 x 2% = 0.005 exactly; half-even would give 0.00
        assert processing_fee(Decimal("0.25"), Decimal("2"), Decimal("0")) == Decimal("0.01")


class TestProcessingFee:
    def test_percentage_plus_flat(self):
        result = compute_amortization(_terms(fee_percentage=Decimal("2"), fee_flat=Decimal("100")))
        assert result.processing_fee == Decimal("300.00")

    def test_no_fee(self, flat_terms):
        assert compute_amortization(flat_terms).processing_fee == Decimal("0.00")

    def test_fee_independent_of_method(self):
        fees = {
            compute_amortization(
                _terms(method=m, fee_percentage=Decimal("1.5"), fee_flat=Decimal("50"))
            ).processing_fee
            for m in ("declining", "flat", "simple")
        }
        assert fees == {Decimal("200.00")}


class TestValidation:
    def test_zero_principal(self):
        with pytest.raises(InvalidInput, match="Principal"):
            compute_amortization(_terms(principal="0"))

    def test_negative_principal(self):
        with pytest.raises(InvalidInput):
            compute_amortization(_terms(principal="-100"))

    def test_zero_tenure(self):
        with pytest.raises(InvalidInput, match="Tenure"):
            compute_amortization(_terms(tenure=0))

    def test_unknown_method(self):
        with pytest.raises(InvalidInput, match="balloon"):
            compute_amortization(_terms(method="balloon"))

    def test_negative_rate(self):
        with pytest.raises(InvalidInput):
            compute_amortization(_terms(rate="-1"))

    def test_negative_fee(self):
        with pytest.raises(InvalidInput):
            compute_amortization(_terms(fee_flat=Decimal("-5")))

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            compute_amortization(_terms(tenure=-3))

    def test_method_string_is_normalized(self):
        assert compute_amortization(_terms(method=" FLAT ")) == compute_amortization(
            _terms(method=InterestMethod.FLAT)
        )


class TestDeterminism:
    def test_same_input_same_output(self):
        terms = _terms("54321.09", "13.7", 27, "declining", fee_percentage=Decimal("3"))
        assert compute_amortization(terms) == compute_amortization(terms)


class TestLoanDates:
    def test_maturity_adds_tenure(self):
        assert maturity_date(date(2024, 10, 15), 12) == date(2025, 10, 15)

    def test_maturity_clamps_month_end(self):
        assert maturity_date(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert maturity_date(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_maturity_crosses_years(self):
        assert maturity_date(date(2024, 11, 30), 27) == date(2027, 2, 28)


class TestNetDisbursement:
    def test_fee_withheld(self):
        assert net_disbursement(Decimal("10000"), Decimal("300.00")) == Decimal("9700.00")


class TestProductLimits:
    limits = ProductLimits(
        min_amount=Decimal("5000"),
        max_amount=Decimal("100000"),
        min_tenure_months=3,
        max_tenure_months=24,
    )

    def test_within_bounds(self):
        check_product_limits(self.limits, Decimal("5000"), 24)

    def test_amount_too_high(self):
        with pytest.raises(InvalidInput, match="amount"):
            check_product_limits(self.limits, Decimal("100000.01"), 12)

    def test_tenure_too_short(self):
        with pytest.raises(InvalidInput, match="Tenure"):
            check_product_limits(self.limits, Decimal("10000"), 2)


class TestExtremeTerms:
    def test_tiny_rate_behaves_like_zero(self):
        result = compute_amortization(_terms(rate="1E-27", method="declining"))
        assert result.monthly_installment == Decimal("833.33")
        assert result.total_interest == Decimal("0.00")
        assert result.total_amount == Decimal("10000.00")

    def test_very_long_tenure(self):
        # (1 + r)^n dwarfs 1, so the installment tends to P * r
        result = compute_amortization(_terms(tenure=300_000_000, method="declining"))
        assert result.monthly_installment == Decimal("100.00")
        assert result.total_amount == Decimal("10000") + result.total_interest

    def test_unrepresentable_totals(self):
        with pytest.raises(InvalidInput, match="cannot be computed"):
            compute_amortization(_terms(tenure=10**60))

    def test_plain_numbers_accepted(self):
        result = compute_amortization(LoanTerms(10000, 12, 12, "flat"))
        assert result.total_interest == Decimal("1200.00")
        assert result.total_amount == Decimal("11200.00")

    def test_maturity_beyond_calendar(self):
        with pytest.raises(InvalidInput, match="year"):
            maturity_date(date(2024, 1, 1), 12 * 9000)


class TestRequireCents:
    def test_whole_cents(self):
        require_cents(Decimal("933.33"))
        require_cents(Decimal("100"))
        require_cents(Decimal("1.500"))

    def test_fraction_of_a_cent(self):
        with pytest.raises(InvalidInput, match="fractions of a cent"):
            require_cents(Decimal("0.005"), "Payment amount")


class TestRepaymentSchedule:
    def test_flat_installments(self, flat_terms):
        rows = repayment_schedule(flat_terms, date(2024, 10, 15))
        assert len(rows) == 12
        assert rows[0].installment_number == 1
        assert rows[0].total_amount == Decimal("933.33")
        assert rows[0].interest == Decimal("100.00")
        assert rows[0].principal == Decimal("833.33")
        # Last installment picks up the rounding
        assert rows[-1].total_amount == Decimal("933.37")
        assert rows[-1].principal == Decimal("833.37")

    def test_declining_interest_on_balance(self):
        rows = repayment_schedule(_terms(principal="100000", method="declining"), date(2024, 1, 1))
        assert rows[0].interest == Decimal("1000.00")
        assert rows[0].principal == Decimal("7884.88")
        assert rows[1].interest == Decimal("921.15")
        assert rows[-1].interest < rows[0].interest

    def test_zero_rate_declining(self):
        rows = repayment_schedule(_terms(principal="12000", rate="0", method="declining"), date(2024, 1, 1))
        assert {row.total_amount for row in rows} == {Decimal("1000.00")}
        assert all(row.interest == 0 for row in rows)

    def test_single_installment(self):
        rows = repayment_schedule(_terms(tenure=1), date(2024, 1, 1))
        assert len(rows) == 1
        assert rows[0].total_amount == Decimal("10100.00")

    def test_due_dates_step_monthly(self):
        rows = repayment_schedule(_terms(tenure=3), date(2024, 1, 31))
        assert [row.due_date for row in rows] == [
            date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30),
        ]

    def test_last_due_date_is_maturity(self, flat_terms):
        start = date(2024, 10, 15)
        rows = repayment_schedule(flat_terms, start)
        assert rows[-1].due_date == maturity_date(start, flat_terms.tenure_months)

    @pytest.mark.parametrize("method", ["declining", "flat", "simple"])
    @pytest.mark.parametrize("principal,rate,tenure", [
        ("10000", "12", 12),
        ("15333.33", "7.75", 18),
        ("999", "35", 5),
        ("100000", "24", 60),
    ])
    def test_rows_sum_to_totals(self, method, principal, rate, tenure):
        terms = _terms(principal, rate, tenure, method)
        result = compute_amortization(terms)
        rows = repayment_schedule(terms, date(2024, 1, 1))
        assert sum(row.principal for row in rows) == Decimal(principal)
        assert sum(row.interest for row in rows) == result.total_interest
        assert sum(row.total_amount for row in rows) == result.total_amount
        assert all(row.principal >= 0 and row.interest >= 0 for row in rows)

    def test_invalid_terms(self):
        with pytest.raises(InvalidInput):
            repayment_schedule(_terms(principal="0"), date(2024, 1, 1))
