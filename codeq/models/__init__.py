# Importing this package registers every table on Base.metadata
# (Alembic autogenerate and the test fixtures rely on it).
from codeq.models.user import Follow, User
from codeq.models.question import Question, QuestionTag, QuestionViewer
from codeq.models.answer import Answer
from codeq.models.comment import Comment
from codeq.models.vote import Vote

__all__ = [
    "Answer",
    "Comment",
    "Follow",
    "Question",
    "QuestionTag",
    "QuestionViewer",
    "User",
    "Vote",
]
