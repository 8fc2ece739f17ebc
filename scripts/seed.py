import sys
import os
import random
from sqlalchemy.orm import Session
from datetime import date, datetime, timedelta
from decimal import Decimal
from faker import Faker

# Add the project root to the Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from expense_tracker.db.core import (
    session_local,
    UserDB,
    TransactionDB,
    BudgetDB,
    TransactionType,
    PaymentMethod,
    BudgetPeriod,
)
from expense_tracker.crud.crud_user import hash_password
from expense_tracker.services.budget_reconciler import reconcile_all

fake = Faker()

EXPENSE_CATEGORIES = {
    "food": ["groceries", "restaurants", "coffee"],
    "transport": ["fuel", "public transit", "ride share"],
    "shopping": ["clothing", "electronics", "home goods"],
    "entertainment": ["movies", "concerts", "streaming"],
    "utilities": ["electricity", "water", "internet"],
    "health": ["pharmacy", "gym", "doctor"],
}
INCOME_CATEGORIES = ["salary", "freelance", "investments"]


def seed_database(num_users: int = 3, days_of_history: int = 90):
    """
    Fills the database with users, a few months of transactions, and monthly budgets.
    """
    db: Session = session_local()

    try:
        if db.query(UserDB).count() > 0:
            print("Database appears to be already seeded. Exiting.")
            return

        print("Seeding database with sample data...")
        today = date.today()
        month_start = today.replace(day=1)
        next_month = (month_start + timedelta(days=32)).replace(day=1)
        month_end = next_month - timedelta(days=1)

        for i in range(num_users):
            print(f"--- Seeding user {i + 1}/{num_users} ---")

            user = UserDB(
                email=fake.unique.email(),
                name=fake.name(),
                password_hash=hash_password("password123"),
                currency=random.choice(["INR", "USD", "EUR"]),
                monthly_budget=Decimal(random.randint(2000, 6000)),
            )
            db.add(user)
            db.flush()

            # Monthly income
            for months_back in range(days_of_history // 30 + 1):
                pay_date = month_start - timedelta(days=30 * months_back)
                db.add(TransactionDB(
                    user_id=user.id,
                    amount=Decimal(random.randint(3000, 8000)),
                    transaction_type=TransactionType.INCOME,
                    category=random.choice(INCOME_CATEGORIES),
                    description="Monthly income",
                    transaction_date=pay_date,
                    payment_method=PaymentMethod.BANK_TRANSFER,
                    tags=["income"],
                ))

            # Daily spending
            for _ in range(days_of_history * 2):
                category = random.choice(list(EXPENSE_CATEGORIES))
                db.add(TransactionDB(
                    user_id=user.id,
                    amount=Decimal(str(round(random.uniform(3.0, 150.0), 2))),
                    transaction_type=TransactionType.EXPENSE,
                    category=category,
                    subcategory=random.choice(EXPENSE_CATEGORIES[category]),
                    description=fake.sentence(nb_words=4).rstrip("."),
                    transaction_date=today - timedelta(days=random.randint(0, days_of_history)),
                    payment_method=random.choice(list(PaymentMethod)),
                    location=fake.city(),
                    tags=random.sample(["weekly", "essential", "impulse", "shared"], k=random.randint(0, 2)),
                    is_deleted=random.random() < 0.05,
                ))

            # Budgets for the current month
            for category in random.sample(list(EXPENSE_CATEGORIES), k=4):
                db.add(BudgetDB(
                    user_id=user.id,
                    name=f"{category.title()} {month_start:%B}",
                    amount=Decimal(random.choice([300, 500, 800, 1000])),
                    category=category,
                    period=BudgetPeriod.MONTHLY,
                    start_date=month_start,
                    end_date=month_end,
                    alert_threshold=Decimal(random.choice([70, 80, 90])),
                    created_at=datetime.utcnow(),
                ))

            db.commit()

            budgets = reconcile_all(db, user.id)
            print(f"User {user.id} seeded with {len(budgets)} reconciled budgets.")

        print("Successfully seeded database.")

    except Exception as e:
        print(f"An error occurred: {e}")
        import traceback
        traceback.print_exc()
        db.rollback()
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
