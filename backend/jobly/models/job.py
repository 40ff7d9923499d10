from sqlalchemy import Column, String, Integer, Text, Numeric, ForeignKey, CheckConstraint

from jobly.database import Base


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint("salary >= 0", name="jobs_salary_check"),
        CheckConstraint("equity <= 1.0", name="jobs_equity_check"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    salary = Column(Integer, nullable=True)
    equity = Column(Numeric, nullable=True)  # exact decimal, read back as float by services

    # Immutable after creation; jobs go away with their company
    company_handle = Column(
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
