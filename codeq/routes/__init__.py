"""
CodeQ Backend - API Routes Package
==================================

Route Inventory:
    - auth.py:      /api/auth       register, login, me
    - questions.py: /api/questions  list/detail/CRUD, pin, lock, nested answers
    - answers.py:   /api/answers    detail, edit, delete, accept, verify
    - comments.py:  /api/comments   create, list by target, edit, delete
    - votes.py:     /api/votes      cast/toggle, caller's vote status
    - users.py:     /api/users      leaderboard, profiles, follows, roles
    - health.py:    /health

Routes stay THIN: pull values out of the request, call one service method,
set status codes and headers. Business rules live in codeq.services.
"""
