"""
Transcript rendering for Granola Sync.

Transcript entries are grouped into speaker turns: each contiguous run of
entries from the same speaker becomes one level-2 section.
"""

from typing import Dict, List, Optional, Sequence

from ..models import TranscriptEntry


DEFAULT_SPEAKERS: Dict[str, str] = {
    "microphone": "Me",
    "system": "Guest",
}


class SpeakerResolver:
    """
    Maps audio source identifiers to speaker labels.

    Sources without a configured label are shown under their own identifier,
    so any number of speakers is supported.
    """

    def __init__(self, speakers: Optional[Dict[str, str]] = None):
        self.speakers = dict(DEFAULT_SPEAKERS if speakers is None else speakers)

    def label(self, source: str) -> str:
        return self.speakers.get(source) or source or "Unknown"


def format_transcript(
    entries: Sequence[TranscriptEntry],
    title: str,
    speakers: Optional[SpeakerResolver] = None
) -> str:
    """
    Render a transcript as Markdown grouped by speaker turn.

    Args:
        entries: Transcript entries in spoken order
        title: The meeting title
        speakers: Resolver for speaker labels (defaults to DEFAULT_SPEAKERS)

    Returns:
        The transcript document
    """
    speakers = speakers or SpeakerResolver()
    output = f"# Transcript for: {title}\n\n"

    current_speaker: Optional[str] = None
    current_start = ""
    current_text: List[str] = []

    for entry in entries:
        speaker = speakers.label(entry.source)
        if speaker == current_speaker:
            current_text.append(entry.text)
            continue

        if current_speaker is not None:
            output += _format_turn(current_speaker, current_start, current_text)
        current_speaker = speaker
        current_start = entry.start_timestamp
        current_text = [entry.text]

    if current_speaker is not None:
        output += _format_turn(current_speaker, current_start, current_text)

    return output


def _format_turn(speaker: str, start: str, texts: List[str]) -> str:
    return f"## {speaker} ({start})\n\n" + " ".join(texts) + "\n\n"
