from pydantic import BaseModel


class StatsResponse(BaseModel):
    total_clients: int
    total_expected: int
    total_paid: int
    outstanding: int
    overdue_count: int
