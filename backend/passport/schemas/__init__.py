"""Pydantic schemas for the Property Passport API."""

from passport.schemas.auth import *
from passport.schemas.property import *
from passport.schemas.stakeholder import *
from passport.schemas.evidence import *
from passport.schemas.flag import *
from passport.schemas.event import *
from passport.schemas.task import *
from passport.schemas.invitation import *
from passport.schemas.watchlist import *
from passport.schemas.search import *
from passport.schemas.integrations import *
