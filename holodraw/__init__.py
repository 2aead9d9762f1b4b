# HoloDraw - Gesture-Controlled Holographic Drawing Surface
# Author: HoloDraw Team
# Version: 1.0.0

"""
Core modules for the gesture-controlled drawing surface:
- geometry: Coordinate math and selfie-view mapping
- landmarks: Hand landmark sets produced by the pose estimator
- hand_tracking: MediaPipe hand landmark detection
- gesture_logic: Landmark geometry to gesture classification
- viewport: Zoom transform between world and screen space
- canvas: Strokes, smoothed rendering and render surfaces
- particles: Dissolve particle simulation
- dwell: Hover-to-select timing engine
- menu: Hands-free settings menu
- interaction: Per-frame interaction state machine
- camera: Webcam stream handler
- app: Main application loop
"""

__version__ = "1.0.0"
__author__ = "HoloDraw Team"
