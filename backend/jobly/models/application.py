from sqlalchemy import Column, String, Integer, ForeignKey

from jobly.database import Base


class Application(Base):
    """A user's application to a job. Removed with either side."""
    __tablename__ = "applications"

    username = Column(
        String(25),
        ForeignKey("users.username", ondelete="CASCADE"),
        primary_key=True
    )
    job_id = Column(
        Integer,
        ForeignKey("jobs.id", ondelete="CASCADE"),
        primary_key=True
    )
