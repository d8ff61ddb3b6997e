"""
Export a Zhengfang (正方) academic affairs timetable to JSON / CSV / ICS.
"""
__version__ = "0.1.0"
