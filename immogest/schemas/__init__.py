"""Pydantic schemas for the ImmoGest API."""

from immogest.schemas.property import *
from immogest.schemas.tenant import *
from immogest.schemas.maintenance import *
from immogest.schemas.transaction import *
from immogest.schemas.dashboard import *
