"""Factories that build story elements and add them to the story bible."""

from .chapters import ChapterGenerator, GeneratedChapter
from .characters import CharacterCreator, CreatedCharacter
from .plot_threads import CreatedPlotThread, PlotThreadCreator
from .premise import ParsedPremise, PremiseParser

__all__ = [
    "ChapterGenerator",
    "GeneratedChapter",
    "CharacterCreator",
    "CreatedCharacter",
    "CreatedPlotThread",
    "PlotThreadCreator",
    "ParsedPremise",
    "PremiseParser",
]
