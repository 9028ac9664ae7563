from flask import Blueprint, jsonify

from dailyquest.schemas import WeatherRequest
from dailyquest.services import services
from dailyquest.utils.validation import parse_body

weather_bp = Blueprint("weather_bp", __name__, url_prefix="/api")


@weather_bp.post("/weather")
def weather():
    data = parse_body(WeatherRequest)
    return jsonify(services().weather.current(data.latitude, data.longitude, data.units))
