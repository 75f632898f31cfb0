"""
Trip planning state.

Responsibilities:
- Hold one trip (city, dates, generated day cards) as an immutable value.
- Track the current day and vibe, per-day selections, visited and
  bookmarked places.
- Expose pure reducer functions; the web layer stores the result in the
  session between requests.
"""
