"""
Services layer - issue lifecycle logic goes here.
Keep services focused on one concern (storage ownership, duplicates, lifecycle, reads).

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- IssueService is the only entry point routes should call
- Status changes go through the LifecycleEngine and nowhere else
"""
