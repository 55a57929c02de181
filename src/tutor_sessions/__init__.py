'''
TutorSessions backend.

Students, scheduled sessions, a per-student ledger, Zoom meetings and WhatsApp
reminders behind an approval-gated email/password login. The ASGI app lives in
`tutor_sessions.main:app`.
'''

__version__ = "1.0.0"
