'''

'''
from pydantic import BaseModel

class DashboardStats(BaseModel):
    total_students: int
    active_students: int
    upcoming_sessions: int
    completed_this_month: int
