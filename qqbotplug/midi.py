"""Simple MIDI composition from note strings and an ear-training game."""

from __future__ import annotations

import os
import random
import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping

import mido

NOTE_MAP = {
    "C": 60,
    "Db": 61,
    "D": 62,
    "Eb": 63,
    "E": 64,
    "F": 65,
    "Gb": 66,
    "G": 67,
    "Ab": 68,
    "A": 69,
    "Bb": 70,
    "B": 71,
}

TICKS_PER_QUARTER = 96
VELOCITY = 120
VIOLIN_PROGRAM = 40
DEFAULT_OCTAVE = 5
MAX_ROUND = 6
ANSWER_PATTERN = re.compile(r"^[A-G][b|#]?\d{0,2}$")

_INT_RE = re.compile(r"[+-]?[0-9]+")


class MidiParseError(ValueError):
    """A note string holds a character that cannot be read."""


def octave(base: int, oct: int) -> int:
    """MIDI key of pitch class ``base`` in octave ``oct``, kept within 0..127."""
    base &= 0xFF
    oct &= 0xFF
    if oct > 10:
        oct = 10
    if oct == 0:
        return base
    res = (base + 12 * oct) & 0xFF
    if res > 127:
        res -= 12
    return res


def note_name(n: int) -> str:
    """Name of the pitch class of key ``n``."""
    residue = (n & 0xFF) % 12
    for name, value in NOTE_MAP.items():
        if value % 12 == residue:
            return name
    return ""


def process_one(note: str) -> int:
    """MIDI key of a single note such as ``C#6``; the octave defaults to 5."""
    base = 0
    level = 0
    for c in note.replace(" ", "").encode("utf-8"):
        if ord("A") <= c <= ord("G"):
            base = NOTE_MAP[chr(c)] % 12
        elif c == ord("b"):
            base = (base - 1) & 0xFF
        elif c == ord("#"):
            base = (base + 1) & 0xFF
        elif ord("0") <= c <= ord("9"):
            level = (level * 10 + c - ord("0")) & 0xFF
    if level == 0:
        level = DEFAULT_OCTAVE
    return octave(base, level)


def _atoi(text: str) -> int:
    return int(text) if _INT_RE.fullmatch(text) else 0


def _shift(n: int) -> int:
    return (1 << n) & 0xFFFFFFFF if n < 32 else 0


def _duration(length: int) -> int:
    """Ticks of a note of ``2**length`` quarters."""
    if length >= 0:
        return (TICKS_PER_QUARTER * _shift(length)) & 0xFFFFFFFF
    divisor = _shift(-length)
    if divisor == 0:
        raise MidiParseError(f"音符长度过短: {length}")
    return TICKS_PER_QUARTER // divisor


def _is_note_start(c: int) -> bool:
    return ord("A") <= c <= ord("G") or c == ord("R")


def build_midi(text: str) -> mido.MidiFile:
    """Compose a violin melody from a note string.

    Each note is a letter A-G, optionally followed by ``b`` or ``#``, an
    octave number and ``<n`` for a length of ``2**n`` quarters. ``R`` is a
    rest taking the same length suffix. Spaces are ignored.
    """
    k = text.replace(" ", "").encode("utf-8")
    track = mido.MidiTrack()
    track.append(mido.MetaMessage("time_signature", numerator=4, denominator=4, time=0))
    track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(60), time=0))
    track.append(mido.MetaMessage("instrument_name", name="Violin", time=0))
    track.append(mido.Message("program_change", channel=0, program=VIOLIN_PROGRAM, time=0))

    i = 0
    delay = 0
    size = len(k)
    while i < size:
        base = 0
        level = 0
        rest = False
        length_chars: list[str] = []
        while True:
            c = k[i]
            if c == ord("R"):
                rest = True
                i += 1
            elif ord("A") <= c <= ord("G"):
                base = NOTE_MAP[chr(c)] % 12
                i += 1
            elif c == ord("b"):
                base = (base - 1) & 0xFF
                i += 1
            elif c == ord("#"):
                base = (base + 1) & 0xFF
                i += 1
            elif ord("0") <= c <= ord("9"):
                level = (level * 10 + c - ord("0")) & 0xFF
                i += 1
            elif c == ord("<"):
                i += 1
                while i < size and (k[i] == ord("-") or ord("0") <= k[i] <= ord("9")):
                    length_chars.append(chr(k[i]))
                    i += 1
            else:
                raise MidiParseError(f"无法解析第{i}个位置的{chr(c)}字符")
            if i >= size or _is_note_start(k[i]):
                break
        ticks = _duration(_atoi("".join(length_chars)))
        if rest:
            delay = ticks
            continue
        if level == 0:
            level = DEFAULT_OCTAVE
        key = octave(base, level)
        track.append(mido.Message("note_on", channel=0, note=key, velocity=VELOCITY, time=delay))
        track.append(mido.Message("note_off", channel=0, note=key, velocity=0, time=ticks))
        delay = 0
    track.append(mido.MetaMessage("end_of_track", time=0))

    midi = mido.MidiFile(type=1, ticks_per_beat=TICKS_PER_QUARTER)
    midi.tracks.append(track)
    return midi


def write_midi(path, text: str) -> None:
    """Write the melody of ``text`` to ``path`` unless that file already exists."""
    target = Path(path)
    if target.exists():
        return
    midi = build_midi(text)
    midi.save(str(target))


def str_to_music(text: str, midi_path) -> str:
    """Write a MIDI file and render it to WAV with timidity; returns the WAV path."""
    midi_path = str(midi_path)
    write_midi(midi_path, text)
    wav_path = midi_path.replace(".mid", ".wav")
    subprocess.run(
        ["timidity", os.path.abspath(midi_path), "-Ow", "-o", os.path.abspath(wav_path)],
        check=True,
    )
    return wav_path


def random_target(rng: random.Random | None = None) -> tuple[int, str]:
    """A random key for the ear-training game and its written answer."""
    rng = rng or random.Random()
    target = 55 + rng.randrange(34)
    return target, note_name(target) + str(target // 12)


class Verdict(Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    FAILED = "failed"


@dataclass(frozen=True)
class Attempt:
    """Result of one answer in the ear-training game."""

    verdict: Verdict
    answer: str
    error_count: int
    finished: bool


class ListeningPractice:
    """Five rounds of naming a played note, alone or as a team."""

    def __init__(self, team: bool = False, rng: random.Random | None = None) -> None:
        self.team = team
        self._rng = rng or random.Random()
        self.max_errors = 10 if team else 3
        self.round = 1
        self.error_count = 0
        self.scores: dict[int, float] = {}
        self.target, self.answer = random_target(self._rng)

    def submit(self, user_id: int, note: str) -> Attempt:
        """Judge an answer; a hit or too many misses moves on to the next round."""
        if self.finished():
            raise RuntimeError("practice is over")
        answer = self.answer
        hit = process_one(note) == self.target
        if not hit:
            self.error_count += 1
            if self.error_count != self.max_errors:
                return Attempt(Verdict.WRONG, answer, self.error_count, False)

        if self.team:
            gain = 1.0 if self.error_count != self.max_errors else 0.0
        else:
            gain = {0: 1.0, 1: 0.5, 2: 0.2}.get(self.error_count, 0.0)
        if gain:
            self.scores[user_id] = self.scores.get(user_id, 0.0) + gain

        errors = self.error_count
        self.round += 1
        if not self.finished():
            self.error_count = 0
            self.target, self.answer = random_target(self._rng)
        verdict = Verdict.CORRECT if hit else Verdict.FAILED
        return Attempt(verdict, answer, errors, self.finished())

    def finished(self) -> bool:
        return self.round == MAX_ROUND

    def score_text(self, names: Mapping[int, str]) -> str:
        """One ``name: score`` line per scoring player."""
        return "".join(
            f"{names.get(uid, str(uid))}: {score:.1f}\n" for uid, score in self.scores.items()
        )