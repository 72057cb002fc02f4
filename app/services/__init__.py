"""
Services layer - business logic for issue triage and tracking.

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Classification never fails from the caller's side (keyword fallback)
- All state mutation goes through IssueStore
"""
