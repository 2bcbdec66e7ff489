"""Domain layer for Taskboard.

Pure models and functions - no I/O, no side effects:

- project: Project aggregate, status/activity types, membership differ
- task: Task entity and payloads
- user: Users and the acting session
- notification: Inbox entries and deadline rules
- timeline: Read-only projection of project history
- shared: Result monad, error taxonomy, clock helpers
"""
