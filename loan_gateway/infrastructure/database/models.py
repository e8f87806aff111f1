"""SQLAlchemy ORM models for the bank_core schema"""

from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, Integer, ForeignKey, Numeric, Text, JSON
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

# Two-decimal money columns, read back as float
MONEY = Numeric(14, 2, asdecimal=False)


class User(Base):
    """Bank customer (identity fields are owned by the client service)"""

    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(Text, nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    credit_score = Column(Integer, nullable=True)
    status = Column(Text, nullable=False, default="Active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    accounts = relationship("AccountType", back_populates="user", cascade="all, delete-orphan")


class AccountType(Base):
    """Deposit, Savings or Loan account belonging to a user"""

    __tablename__ = "account_type"

    type_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    account_number = Column(String(32), nullable=False, unique=True)
    type_name = Column(Text, nullable=False)  # Deposit | Savings | Loan
    description = Column(Text, nullable=True)
    balance = Column(MONEY, nullable=False, default=0)
    account_status = Column(Text, nullable=False, default="Open")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("User", back_populates="accounts")


class Transaction(Base):
    """Ledger movement on an account"""

    __tablename__ = "transactions"

    transaction_id = Column(Integer, primary_key=True, autoincrement=True)
    type_id = Column(Integer, ForeignKey("account_type.type_id", ondelete="CASCADE"), nullable=False, index=True)
    transaction_type = Column(Text, nullable=False)
    amount = Column(MONEY, nullable=False)
    status = Column(Text, nullable=False, default="Completed")
    description = Column(Text, nullable=True)
    reference_number = Column(String(64), nullable=True)
    transaction_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class EmploymentMultiplier(Base):
    """Affordability multiplier per employment status"""

    __tablename__ = "employment_multipliers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employment_status = Column(String(64), nullable=False, unique=True)
    multiplier = Column(Float, nullable=False)


class CreditTier(Base):
    """Affordability multiplier for an inclusive credit score range"""

    __tablename__ = "credit_tiers"

    tier_id = Column(Integer, primary_key=True, autoincrement=True)
    min_score = Column(Integer, nullable=False)
    max_score = Column(Integer, nullable=False)
    multiplier = Column(Float, nullable=False)


class LoanSettingsRow(Base):
    """Global underwriting settings, a single row"""

    __tablename__ = "loan_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dti_ratio = Column(Float, nullable=True)
    base_interest_rate = Column(Float, nullable=True)  # APR percent


class LoanApplication(Base):
    """Submitted loan application awaiting an admin decision"""

    __tablename__ = "loan_applications"

    application_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    type_id = Column(Integer, nullable=False, default=1)  # loan product
    loan_amount = Column(MONEY, nullable=False)
    loan_term_months = Column(Integer, nullable=False)
    income = Column(MONEY, nullable=False)
    employment_status = Column(Text, nullable=False)
    purpose = Column(Text, nullable=True)
    calculated_max_loan = Column(MONEY, nullable=False)
    monthly_payment = Column(MONEY, nullable=False)
    credit_score = Column(Integer, nullable=False)
    interest_rate = Column(Float, nullable=False)
    repayment_schedule = Column(JSON, nullable=False)
    status = Column(Text, nullable=False, default="Pending")  # Pending | Approved | Denied
    application_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    decided_at = Column(DateTime(timezone=True), nullable=True)


class Loan(Base):
    """Active or settled loan created when an application is approved"""

    __tablename__ = "loans"

    loan_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    application_id = Column(Integer, ForeignKey("loan_applications.application_id"), nullable=False, unique=True)
    principal = Column(MONEY, nullable=False)
    interest_rate = Column(Float, nullable=False)
    term_months = Column(Integer, nullable=False)
    monthly_payment = Column(MONEY, nullable=False)
    remaining_balance = Column(MONEY, nullable=False)
    status = Column(Text, nullable=False, default="Active")  # Active | Paid
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    disbursed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    payments = relationship(
        "LoanPayment", back_populates="loan", cascade="all, delete-orphan", order_by="LoanPayment.period"
    )


class LoanPayment(Base):
    """Scheduled or settled repayment of a loan"""

    __tablename__ = "loan_payments"

    payment_id = Column(Integer, primary_key=True, autoincrement=True)
    loan_id = Column(Integer, ForeignKey("loans.loan_id", ondelete="CASCADE"), nullable=False, index=True)
    period = Column(Integer, nullable=False)
    payment_date = Column(Date, nullable=False)
    amount = Column(MONEY, nullable=False)
    principal = Column(MONEY, nullable=False)
    interest = Column(MONEY, nullable=False)
    status = Column(Text, nullable=False, default="Pending")  # Pending | Paid

    loan = relationship("Loan", back_populates="payments")


class AdminAction(Base):
    """Audit trail of application and loan lifecycle events"""

    __tablename__ = "admin_actions"

    action_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)  # acting admin, 0 = system
    target_id = Column(Integer, nullable=False)
    target_table = Column(Text, nullable=False)
    action_type = Column(Text, nullable=False)  # Create | Approve | Deny | Disburse
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Notification(Base):
    """In-app message for a user"""

    __tablename__ = "notifications"

    notification_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    type = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
