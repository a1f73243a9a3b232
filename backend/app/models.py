from pydantic import BaseModel, Field
from typing import List, Optional

from game_engine.dice import Roll

# --- Shared roll log ---
class RollEntry(BaseModel):
    roll: Roll
    description: str = ""
    user_id: str

class RollHistory(BaseModel):
    """
    The roll log kept in the shared document. Only successful rolls are ever recorded.
    """
    history: List[RollEntry] = Field(default_factory=list)

    def record(self, roll: Roll, description: str, user_id: str) -> RollEntry:
        entry = RollEntry(roll=roll, description=description, user_id=user_id)
        self.history.append(entry)
        return entry

    def latest(self, user_id: Optional[str] = None) -> Optional[RollEntry]:
        for entry in reversed(self.history):
            if user_id is None or entry.user_id == user_id:
                return entry
        return None
