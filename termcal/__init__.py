"""
termcal: academic term resolution and holiday-aware month calendars.
"""
