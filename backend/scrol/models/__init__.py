# Models package init: importing it registers every table with Base.metadata
from scrol.models.candidate import Candidate
from scrol.models.cv import CV
from scrol.models.friend import Friend, FriendStatus

__all__ = ["Candidate", "CV", "Friend", "FriendStatus"]
