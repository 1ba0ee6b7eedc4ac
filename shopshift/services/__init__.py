"""Service package: Business logic layer.

Contains the service classes that enforce the approval workflow's guards
and transitions. Services call repositories for DB operations and only
flush; routers own the commit.
"""
