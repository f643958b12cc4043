#!/usr/bin/env python3
"""
Tracing Analytics - Main Entry Point
Replays a synthetic tracing of a letter through the session aggregator and
prints the resulting feature summary as JSON.
"""

import argparse
import asyncio
import logging
import random

from tracing_analytics import (
    DEFAULT_CONFIG,
    MLCharacterClassifier,
    RawTouchPoint,
    SessionFeatureAggregator,
    get_letter_definition
)


def synthesize_strokes(letter: str, interval_ms: int = 16, lift_ms: int = 400, jitter: float = 1.5):
    """Trace each reference stroke with a little positional noise."""
    path = get_letter_definition(letter).reference_path(DEFAULT_CONFIG.samples_per_segment)
    rng = random.Random(7)
    t = 0
    strokes = []
    for k in range(path.stroke_count):
        stroke = []
        for guide in path.stroke_points(k):
            stroke.append(RawTouchPoint(guide.x + rng.gauss(0, jitter), guide.y + rng.gauss(0, jitter),
                                        t, rng.uniform(0.4, 0.6)))
            t += interval_ms
        strokes.append(stroke)
        t += lift_ms
    return strokes


async def replay(letter: str, use_classifier: bool, model_path: str):
    classifier = MLCharacterClassifier(model_path=model_path) if use_classifier else None
    aggregator = SessionFeatureAggregator(classifier=classifier)
    aggregator.start_session(letter)

    for stroke in synthesize_strokes(letter):
        aggregator.start_stroke()
        for point in stroke:
            aggregator.add_point(point)
        aggregator.end_stroke()

    summary = await aggregator.generate_session_summary(f"demo-{letter}", letter, {'device': 'synthetic'})
    print(summary.to_json())


def main():
    """Main entry point for the tracing replay demo."""
    parser = argparse.ArgumentParser(description="Replay a synthetic letter tracing")
    parser.add_argument('letter', nargs='?', default='A')
    parser.add_argument('--no-classifier', action='store_true', help="skip the letter classifier")
    parser.add_argument('--model-path', default=None, help="joblib file to load/save the classifier")
    parser.add_argument('--debug', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format='[%(asctime)s] %(levelname)s %(name)s: %(message)s')
    asyncio.run(replay(args.letter.upper(), not args.no_classifier, args.model_path))


if __name__ == "__main__":
    main()
