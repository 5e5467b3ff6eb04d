"""Authentication and authorization.

Learn: Users → username/password → signed JWT access token. Every
protected request presents the token as "Authorization: Bearer <token>";
the authenticate dependency turns it into a Principal, and the ownership
rules decide what that Principal may read or change.
"""
