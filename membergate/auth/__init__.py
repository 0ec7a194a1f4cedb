"""
Membership authentication.

Design goals:
- Single shared membership password, no user database.
- Stateless sessions: a signed, expiring token held only in an HttpOnly cookie.
- Fail closed: anything that does not verify is treated as anonymous.
"""
