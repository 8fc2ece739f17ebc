from datetime import date
from decimal import Decimal

from expense_tracker.models.budget import AlertType
from expense_tracker.services.budget_alerts import classify_progress, evaluate, round_progress


def test_warning_scenario(db_session, user, make_budget, make_transaction):
    budget = make_budget(user, amount=1000, alert_threshold=80)
    make_transaction(user, 850, transaction_date=date(2024, 1, 15))
    make_transaction(user, 100, transaction_date=date(2024, 2, 1))

    alerts = evaluate(db_session, user.id)

    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.budget.id == budget.id
    assert alert.spent == Decimal("850")
    assert alert.progress == 85
    assert alert.remaining == Decimal("150")
    assert alert.type == AlertType.WARNING


def test_exceeded_scenario_allows_negative_remaining(db_session, user, make_budget, make_transaction):
    make_budget(user, amount=1000, alert_threshold=80)
    make_transaction(user, 850, transaction_date=date(2024, 1, 15))
    make_transaction(user, 100, transaction_date=date(2024, 2, 1))
    make_transaction(user, 200, transaction_date=date(2024, 1, 20))

    [alert] = evaluate(db_session, user.id)

    assert alert.spent == Decimal("1050")
    assert alert.progress == 105
    assert alert.remaining == Decimal("-50")
    assert alert.type == AlertType.EXCEEDED


def test_threshold_boundaries(db_session, user, make_budget, make_transaction):
    at_threshold = make_budget(user, category="food")
    at_limit = make_budget(user, category="rent")
    just_below = make_budget(user, category="fuel")
    make_transaction(user, 800, category="food")
    make_transaction(user, 1000, category="rent")
    make_transaction(user, "799.99", category="fuel")

    alerts = {alert.budget.id: alert for alert in evaluate(db_session, user.id)}

    assert alerts[at_threshold.id].type == AlertType.WARNING
    assert alerts[at_threshold.id].progress == 80
    assert alerts[at_limit.id].type == AlertType.EXCEEDED
    assert alerts[at_limit.id].progress == 100
    assert just_below.id not in alerts


def test_unspent_budget_never_alerts(db_session, user, make_budget):
    make_budget(user)

    assert evaluate(db_session, user.id) == []


def test_per_budget_threshold(db_session, user, make_budget, make_transaction):
    make_budget(user, category="food", alert_threshold=50)
    make_budget(user, category="rent", alert_threshold=95)
    make_transaction(user, 600, category="food")
    make_transaction(user, 900, category="rent")

    alerts = evaluate(db_session, user.id)

    assert [a.budget.category for a in alerts] == ["food"]


def test_only_active_budgets_with_notifications(db_session, user, make_budget, make_transaction):
    make_budget(user, category="food", is_active=False)
    make_budget(user, category="rent", notifications=False)
    notifying = make_budget(user, category="fuel")
    for category in ("food", "rent", "fuel"):
        make_transaction(user, 950, category=category)

    alerts = evaluate(db_session, user.id)

    assert [a.budget.id for a in alerts] == [notifying.id]


def test_alerts_follow_creation_order(db_session, user, make_budget, make_transaction):
    first = make_budget(user, category="food")
    second = make_budget(user, category="rent")
    third = make_budget(user, category="fuel")
    make_transaction(user, 820, category="food")
    make_transaction(user, 2000, category="rent")
    make_transaction(user, 900, category="fuel")

    alerts = evaluate(db_session, user.id)

    assert [a.budget.id for a in alerts] == [first.id, second.id, third.id]


def test_evaluate_persists_reconciled_spent(db_session, user, make_budget, make_transaction):
    budget = make_budget(user)
    make_transaction(user, 420)

    evaluate(db_session, user.id)

    db_session.expire_all()
    assert budget.spent == Decimal("420")


def test_zero_amount_budget_counts_as_exceeded(db_session, user, make_budget):
    # Only reachable by bypassing input validation
    make_budget(user, amount=0)

    [alert] = evaluate(db_session, user.id)

    assert alert.progress == 100
    assert alert.type == AlertType.EXCEEDED
    assert alert.remaining == Decimal("0")


def test_alerts_are_scoped_to_user(db_session, user, make_user, make_budget, make_transaction):
    other = make_user()
    make_budget(other)
    make_transaction(other, 999)

    assert evaluate(db_session, user.id) == []
    assert len(evaluate(db_session, other.id)) == 1


def test_round_progress_rounds_half_up():
    assert round_progress(Decimal("84.5")) == 85
    assert round_progress(Decimal("84.49")) == 84
    assert round_progress(Decimal("99.5")) == 100


def test_rounded_progress_in_alert(db_session, user, make_budget, make_transaction):
    make_budget(user, amount=1000)
    make_transaction(user, 845)

    [alert] = evaluate(db_session, user.id)

    assert alert.progress == 85


def test_classify_progress_splits_at_one_hundred():
    assert classify_progress(Decimal("80")) == AlertType.WARNING
    assert classify_progress(Decimal("99.99")) == AlertType.WARNING
    assert classify_progress(Decimal("100")) == AlertType.EXCEEDED
    assert classify_progress(Decimal("250")) == AlertType.EXCEEDED
