# app/api/posts/voting.py
"""
Vote toggling.

A user has at most one vote per post. Picking the same direction again
clears it; picking the other direction moves the vote. The change is written
as one update so a user never sits in both sets, even under double clicks.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from firebase_admin import firestore


class VoteDirection(Enum):
    UP = "up"
    DOWN = "down"

    @property
    def field(self) -> str:
        return "upvotes" if self is VoteDirection.UP else "downvotes"

    @property
    def opposite(self) -> "VoteDirection":
        return VoteDirection.DOWN if self is VoteDirection.UP else VoteDirection.UP


@dataclass(frozen=True)
class VotePlan:
    add_to: Optional[str]
    remove_from: Tuple[str, ...]

    def as_update(self, user_id: str) -> Dict[str, Any]:
        update = {field: firestore.ArrayRemove([user_id]) for field in self.remove_from}
        if self.add_to:
            update[self.add_to] = firestore.ArrayUnion([user_id])
        return update


def plan_vote(upvotes: Iterable[str], downvotes: Iterable[str], user_id: str, direction: VoteDirection) -> VotePlan:
    current = upvotes if direction is VoteDirection.UP else downvotes
    if user_id in current:
        return VotePlan(add_to=None, remove_from=(direction.field,))
    return VotePlan(add_to=direction.field, remove_from=(direction.opposite.field,))


def apply_vote(upvotes: List[str], downvotes: List[str], user_id: str,
               direction: VoteDirection) -> Tuple[List[str], List[str]]:
    """In-memory equivalent of writing plan_vote's update."""
    plan = plan_vote(upvotes, downvotes, user_id, direction)
    sets = {"upvotes": list(upvotes), "downvotes": list(downvotes)}
    for field in plan.remove_from:
        sets[field] = [uid for uid in sets[field] if uid != user_id]
    if plan.add_to and user_id not in sets[plan.add_to]:
        sets[plan.add_to].append(user_id)
    return sets["upvotes"], sets["downvotes"]
