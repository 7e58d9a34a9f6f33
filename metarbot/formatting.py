from __future__ import annotations

from html import escape

from metarbot.retrieval import RetrievalOutcome

WELCOME = "Welcome to METAR/TAF bot!"
HELP = (
    "This bot quickly retrieves METAR and TAF for multiple airports.\n"
    "To use it, simply type one or more IATA or ICAO airport codes separated by "
    "either a space or a comma, e.g.\n"
    "KLAX JFK LHR or KLAX,JFK,LHR"
)
USAGE_HINT = "Incorrect format.\nExample usage: KLAX JFK LHR or KLAX,JFK,LHR"


def render_not_found(token: str) -> str:
    return f"Airport {escape(token)} not found."


def render_outcome(outcome: RetrievalOutcome) -> str:
    # Telegram HTML: <code> stops clients from turning report numbers into links.
    if outcome.airport is None or outcome.weather is None:
        return render_not_found(outcome.token)
    airport = outcome.airport
    weather = outcome.weather
    return (
        f"<b>{escape(airport.icao.upper())}/{escape(airport.iata.upper())}\nMETAR</b>\n"
        f"<code>{escape(weather.metar.text)}</code>\n"
        f"<b>TAF</b>\n"
        f"<code>{escape(weather.taf.text)}</code>"
    )
