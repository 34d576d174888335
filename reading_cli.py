"""
reading_cli.py

Command line entrypoint that computes the reading difficulty of a preprocessed sequence.

Integration
- Loads config (file, environment overrides, then command line flags)
- Configures logging
- Loads the sequence document, or builds a synthetic one with --demo
- Resolves one clock rate per configuration: --clock-rate, then a rate mod, then the document
- Builds the sequence at that rate and runs the reading skill, fanned out over
  calculation.max_workers threads when --mods is repeated
- Prints a JSON payload. A repeated --mods gives a "results" list, one entry per --mods

Exit codes
- 0 on success, payload {"ok": true, ...}
- 2 on any input, config or calculation error, payload {"ok": false, "error": "..."}
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import logging_config
import test_beatmap
from config import AppConfig, get_config, load_config
from reading_models import ReadingInputError, ReadingSettings, clock_rate_for_mods
from reading_skill import ReadingResult, evaluate_configurations
from sequence_loader import SequenceLoadError, load_sequence_document

logger = logging.getLogger(__name__)


def _parse_mods(mods_text: str) -> List[str]:
    return [item.strip().upper() for item in (mods_text or "").replace("+", ",").split(",") if item.strip()]


def _build_argument_parser() -> argparse.ArgumentParser:
    argument_parser = argparse.ArgumentParser(description="Reading difficulty calculator")
    source_group = argument_parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument("sequence", nargs="?", type=Path, help="Path to a sequence JSON document.")
    source_group.add_argument("--demo", choices=test_beatmap.PATTERNS, help="Use a built in synthetic sequence.")
    argument_parser.add_argument(
        "--mods",
        action="append",
        default=None,
        help="Mod acronyms, for example HD,FL or HDDT. Repeat to evaluate several configurations.",
    )
    argument_parser.add_argument("--hidden", action="store_true", help="Enable Hidden.")
    argument_parser.add_argument("--flashlight", action="store_true", help="Enable Flashlight.")
    argument_parser.add_argument("--approach-rate", type=float, default=None, help="Overrides the document approach rate.")
    argument_parser.add_argument("--clock-rate", type=float, default=None,
                                 help="Overrides the clock rate implied by mods or the document.")
    argument_parser.add_argument("--section-length", type=float, default=None, help="Strain section length in ms.")
    argument_parser.add_argument("--config", type=Path, default=None, help="Path to a reading_config.json file.")
    argument_parser.add_argument("--peaks", action="store_true", help="Include per section strain peaks in the output.")
    argument_parser.add_argument("--log-level", default=None, help="Overrides the configured log level.")
    return argument_parser


def _split_mod_acronyms(mods: List[str]) -> List[str]:
    # "HDDT" style strings are split into two letter acronyms.
    acronyms: List[str] = []
    for item in mods:
        if len(item) > 2 and len(item) % 2 == 0:
            acronyms.extend(item[index:index + 2] for index in range(0, len(item), 2))
        else:
            acronyms.append(item)
    return acronyms


def _resolve_clock_rate(explicit: Optional[float], mods: List[str], document_rate: float) -> float:
    # --clock-rate, then a rate mod, then the document's own rate.
    if explicit is not None:
        return float(explicit)
    mod_rate = clock_rate_for_mods(mods)
    if mod_rate is not None:
        return mod_rate
    return float(document_rate)


def run(argv: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    parsed_args = _build_argument_parser().parse_args(argv)

    if parsed_args.config is not None:
        app_config, _config_path = load_config(parsed_args.config)
    else:
        app_config, _config_path = get_config()

    logging_config.configure_logging(parsed_args.log_level or app_config.logging.level)

    if parsed_args.demo:
        source = test_beatmap.build_test_beatmap(
            pattern=parsed_args.demo,
            approach_rate=parsed_args.approach_rate if parsed_args.approach_rate is not None else 9.0,
        )
        document_approach_rate: Optional[float] = source.approach_rate
        document_clock_rate = 1.0
        source_text = f"demo:{source.pattern}"
    else:
        source = load_sequence_document(parsed_args.sequence)
        document_approach_rate = source.approach_rate
        document_clock_rate = source.clock_rate
        source_text = str(parsed_args.sequence)

    approach_rate = parsed_args.approach_rate if parsed_args.approach_rate is not None else document_approach_rate
    if approach_rate is None:
        raise ReadingInputError("approach rate is missing, pass --approach-rate or set it in the document")

    configurations: List[Tuple[List[str], float, ReadingSettings]] = []
    for mods_text in parsed_args.mods or [""]:
        mods = _split_mod_acronyms(_parse_mods(mods_text))
        if parsed_args.hidden:
            mods.append("HD")
        if parsed_args.flashlight:
            mods.append("FL")
        clock_rate = _resolve_clock_rate(parsed_args.clock_rate, mods, document_clock_rate)
        settings = ReadingSettings.from_mods(mods, approach_rate, clock_rate=clock_rate)
        configurations.append((mods, clock_rate, settings))

    section_length = _section_length(parsed_args.section_length, app_config)
    max_workers = app_config.calculation.max_workers

    # Configurations sharing a clock rate share one sequence build and one fan-out.
    results: Dict[int, ReadingResult] = {}
    for clock_rate in sorted({item[1] for item in configurations}):
        positions = [position for position, item in enumerate(configurations) if item[1] == clock_rate]
        objects = source.build(clock_rate)
        logger.info(
            "Evaluating %s at clock rate %s, %d configuration(s), max_workers=%d",
            source_text,
            clock_rate,
            len(positions),
            max_workers,
        )
        rate_results = evaluate_configurations(
            objects,
            [configurations[position][2] for position in positions],
            section_length=section_length,
            max_workers=max_workers,
        )
        results.update(zip(positions, rate_results))

    entries = [
        _result_entry(mods, clock_rate, results[position], parsed_args.peaks)
        for position, (mods, clock_rate, _settings) in enumerate(configurations)
    ]

    payload: Dict[str, Any] = {
        "ok": True,
        "source": source_text,
        "object_count": results[0].object_count,
        "section_length_ms": section_length,
    }
    if len(entries) == 1:
        payload.update(entries[0])
    else:
        payload["results"] = entries
    return payload


def _result_entry(mods: List[str], clock_rate: float, result: ReadingResult, include_peaks: bool) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "mods": mods,
        "difficulty": result.difficulty,
        "settings": {
            "approach_rate": result.settings.approach_rate,
            "clock_rate": clock_rate,
            "hidden": result.settings.hidden,
            "flashlight": result.settings.flashlight,
        },
    }
    if include_peaks:
        entry["strain_peaks"] = list(result.strain_peaks)
    return entry


def _section_length(override: Optional[float], app_config: AppConfig) -> float:
    if override is not None:
        return float(override)
    return float(app_config.calculation.section_length_ms)


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        payload = run(argv)
    except (SequenceLoadError, ValueError, OSError) as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
