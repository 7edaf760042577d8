"""ParkLine Residences apartment data service.

Parses the published apartment sheet (CSV), normalises it into apartment
records and exposes lookup / filter / analytics operations, plus the lead and
analytics-event persistence used by the marketing site.
"""

__version__ = "0.3.0"
