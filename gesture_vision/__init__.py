"""
Live Gesture Session Service
============================

Per-session camera pipelines that turn a raised or lowered hand into
"higher" / "lower" events for a card game.

Packages:
    - core: domain types, event bus, per-frame pipeline
    - modules.capture: camera handles, frame downscaling, background capture
    - modules.detection: motion, skin-color and brightness detectors
    - modules.recognition: signal fusion and zone classification
    - modules.control: event dispatch and the game-engine bridge
    - modules.session: session state, capture scheduler, session registry
    - modules.utils: configuration, logging, cycle timing
"""

__version__ = "1.0.0"
