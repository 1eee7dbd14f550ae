from __future__ import annotations

from enum import Enum


class Env(str, Enum):
    dev = "dev"
    prod = "prod"
    test = "test"


class StrandKind(str, Enum):
    DRIVE = "DRIVE"
    DOCUMENT = "DOCUMENT"
