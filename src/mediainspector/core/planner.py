"""Validate language requests and freeze them into remediation plans."""

import re
from typing import Mapping

from mediainspector.errors import EmptyPlanError, InvalidTargetError
from mediainspector.models.file import MediaFile
from mediainspector.models.plan import LanguageAssignment, RemediationPlan
from mediainspector.models.track import TrackKind
from mediainspector.utils.language import is_valid_language_code

_KEY_PATTERN = re.compile(r"(?P<kind>[a-z]+)_(?P<index>\d+)")


def parse_track_key(key: str) -> tuple[TrackKind, int]:
    """Split a request key such as "subtitle_1" into kind and index.

    Raises:
        InvalidTargetError: If the key is not "<audio|subtitle>_<index>"
    """
    match = _KEY_PATTERN.fullmatch(key) if isinstance(key, str) else None
    if match is None:
        raise InvalidTargetError(f"Malformed track key: {key!r}", key=str(key))

    try:
        kind = TrackKind(match.group("kind"))
    except ValueError:
        raise InvalidTargetError(f"Unknown track kind in key: {key!r}", key=key) from None

    return kind, int(match.group("index"))


def build_plan(
    file: MediaFile,
    requested_languages: Mapping[str, str],
    allow_empty: bool = False,
) -> RemediationPlan:
    """Build a remediation plan for one file.

    Every request is checked against the file as it is now: the track must
    exist and its language must still be Unknown, so a stale request can
    never overwrite a correct tag.

    Args:
        file: Current catalog entry for the file
        requested_languages: Mapping of "<kind>_<index>" keys to 3-letter codes
        allow_empty: Accept an empty request for a file with unknown tracks
            (the caller chose to leave them unknown)

    Returns:
        Plan with one assignment per key, audio before subtitle, by index

    Raises:
        InvalidTargetError: Bad key, missing track, already-tagged track,
            or malformed language code
        EmptyPlanError: Nothing requested for a file that has unknown tracks
    """
    if not requested_languages:
        if file.has_unknown_tracks and not allow_empty:
            raise EmptyPlanError(
                f"{file.path} has tracks with unknown languages; "
                "supply at least one language or explicitly leave them unknown"
            )
        return RemediationPlan(path=file.path)

    assignments: dict[tuple[TrackKind, int], LanguageAssignment] = {}

    for key, language in requested_languages.items():
        kind, index = parse_track_key(key)
        tracks = file.tracks(kind)

        if index >= len(tracks):
            raise InvalidTargetError(
                f"{file.path} has no {kind.value} track {index} "
                f"({len(tracks)} {kind.value} track(s))",
                key=key,
            )

        track = tracks[index]
        if not track.is_unknown:
            raise InvalidTargetError(
                f"{kind.value} track {index} of {file.path} is already tagged "
                f"'{track.language}'",
                key=key,
            )

        if not is_valid_language_code(language):
            raise InvalidTargetError(
                f"Invalid language code for {key}: {language!r} "
                "(expected 3 lowercase letters)",
                key=key,
            )

        if (kind, index) in assignments:
            raise InvalidTargetError(f"Duplicate request for {kind.value} track {index}", key=key)

        assignments[(kind, index)] = LanguageAssignment(kind=kind, index=index, language=language)

    ordered = sorted(assignments.values(), key=lambda a: (a.kind.order, a.index))
    return RemediationPlan(path=file.path, assignments=tuple(ordered))
