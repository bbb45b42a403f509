"""
effect-engine CLI

Commands:
- effect-engine run MODULE:ATTR - Run a definition live and print its timeline
- effect-engine replay MODULE:ATTR - Fold signals without starting effects
- effect-engine version
"""
