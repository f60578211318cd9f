"""SkillVector: semantic people search over ingested professional profiles."""

__version__ = "0.1.0"
