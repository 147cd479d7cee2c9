"""
Token estimates for skill content.

Skills are fed to an assistant as context: the metadata line of every
skill is always present, and a body is added once the skill triggers.
These counts show what each level costs. They are estimates; the
encoding only approximates the tokenizer of whatever model ends up
reading the text.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import typing as _typing

import tiktoken as _tiktoken

import aetherskills.constants as constants

if _typing.TYPE_CHECKING:
    import aetherskills.skills.skill as skill_module


def get_encoder(model: str) -> _tiktoken.Encoding:
    """
    Get a tiktoken encoder for the given model.

    Falls back to cl100k_base for models tiktoken does not know.
    """
    try:
        return _tiktoken.encoding_for_model(model)
    except KeyError:
        return _tiktoken.get_encoding("cl100k_base")


def count_tokens(encoder: _tiktoken.Encoding, text: str) -> int:
    """Count the number of tokens in a text string."""
    return len(encoder.encode(text))


@_dataclasses.dataclass(frozen=True)
class SkillTokenEstimate:
    """Token cost of one skill."""

    name: str
    metadata_tokens: int
    body_tokens: int

    def to_dict(self) -> dict[str, _typing.Any]:
        return _dataclasses.asdict(self)


class SkillTokenCounter:
    """
    Counts tokens for skill metadata and bodies.

    Usage:
        counter = SkillTokenCounter()
        estimate = counter.estimate(skill)
    """

    def __init__(
        self,
        model: str = constants.DEFAULT_TOKENIZER_MODEL,
        encoder: _tiktoken.Encoding | None = None,
    ) -> None:
        """
        Initialize with a model name for encoder selection.

        Args:
            model: Model name for tokenizer selection.
            encoder: Pre-built encoder (skips selection by model).
        """
        self._encoder = encoder or get_encoder(model)

    @property
    def encoder_name(self) -> str:
        """Name of the encoder being used."""
        return self._encoder.name

    def count(self, text: str) -> int:
        return count_tokens(self._encoder, text)

    def estimate(self, skill: skill_module.Skill) -> SkillTokenEstimate:
        """Estimate the metadata and body cost of a skill."""
        return SkillTokenEstimate(
            name=skill.name,
            metadata_tokens=self.count(skill.get_metadata_for_prompt()),
            body_tokens=self.count(skill.body),
        )
