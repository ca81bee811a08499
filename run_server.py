#!/usr/bin/env python3
"""
Run the video pair relay.

This script starts the join/leave API and binds one video endpoint per
participant slot.
"""

import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from video_pair_relay.api.server import main

if __name__ == "__main__":
    main()
