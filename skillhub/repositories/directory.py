"""User directory and skill catalog: the two lookup collaborators."""

import abc
from typing import Optional

from skillhub.models.skill import Skill
from skillhub.models.user import User
from skillhub.repositories.base import _raw


class UserDirectory(abc.ABC):

    @abc.abstractmethod
    def get(self, user_id: int) -> Optional[User]:
        ...

    @abc.abstractmethod
    def get_for_update(self, user_id: int) -> Optional[User]:
        """Like ``get`` but row-locks the user until the transaction ends."""

    @abc.abstractmethod
    def update_standing(self, user_id: int, **changes) -> Optional[User]:
        """Write block/suspension fields on the user."""


class SkillCatalog(abc.ABC):

    @abc.abstractmethod
    def get(self, skill_id: int) -> Optional[Skill]:
        ...


class SqlUserDirectory(UserDirectory):

    def __init__(self, db):
        self.db = db

    def get(self, user_id):
        return self.db.get(User, user_id)

    def get_for_update(self, user_id):
        return self.db.query(User).filter(
            User.id == user_id
        ).with_for_update().populate_existing().first()

    def update_standing(self, user_id, **changes):
        user = self.get(user_id)
        if user is None:
            return None
        for key, value in changes.items():
            setattr(user, key, _raw(value))
        self.db.flush()
        return user


class SqlSkillCatalog(SkillCatalog):

    def __init__(self, db):
        self.db = db

    def get(self, skill_id):
        return self.db.get(Skill, skill_id)
