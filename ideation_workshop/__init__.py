"""
Ideation Workshop - Facilitation toolkit for creative ideation workshops.

Participants combine Thing/Sensor/Action/Feedback/Service cards into
product ideas, refine them with a local generative text service, build
a storyboard, evaluate against criteria and produce an elevator pitch.
"""

__version__ = "0.1.0"
