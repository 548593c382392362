"""
CodeQ Backend - Services Layer
==============================

What:  Business rules between the routes (HTTP) and the ORM models.
How:   One module-level singleton per service. Every method takes the
       request's AsyncSession as its first argument and only flushes;
       codeq.database.get_db_session commits once the route returns.

Service Inventory:
    - AuthService:     registration, login, token issuing
    - QuestionService: listing/search, detail + view counting, CRUD, pin/lock
    - AnswerService:   answer CRUD, accept/un-accept bonus, verification
    - CommentService:  comments on questions and answers
    - VoteService:     vote toggling with counter and reputation updates
    - UserService:     profiles, leaderboard, following, roles
    - common:          shared lookups, reputation increments, cascades
"""
