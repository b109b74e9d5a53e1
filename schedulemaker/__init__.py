"""
ScheduleMaker: generate every conflict-free combination of course sections.
"""
