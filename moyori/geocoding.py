import logging
from typing import Dict, Optional

import googlemaps


logger = logging.getLogger(__name__)

# Google address component type -> our field, most specific first
COMPONENT_FIELDS = {
    'prefecture': ['administrative_area_level_1'],
    'city': ['locality'],
    'town': ['sublocality_level_1', 'sublocality'],
    'postal': ['postal_code'],
}


class ReverseGeocoder:
    """Turns a coordinate into a Japanese address using Google's Geocoding API"""

    def __init__(self, api_key: Optional[str], client: Optional[googlemaps.Client] = None):
        self.client = client
        if self.client is None and api_key:
            self.client = googlemaps.Client(key=api_key)

    def reverse_geocode(self, lat: float, lng: float) -> Optional[Dict]:
        """
        Returns {'prefecture', 'city', 'town', 'postal'} or None if nothing was found
        """
        if self.client is None:
            logger.warning("Reverse geocoding requested but no Google Maps API key is configured")
            return None

        try:
            results = self.client.reverse_geocode((lat, lng), language='ja')
        except (googlemaps.exceptions.ApiError, googlemaps.exceptions.TransportError,
                googlemaps.exceptions.Timeout) as e:
            logger.error(f"Reverse geocoding error: {e}")
            return None

        if not results:
            return None

        components = results[0].get('address_components', [])
        address = {}
        for field_name, types in COMPONENT_FIELDS.items():
            address[field_name] = None
            for wanted in types:
                match = next((c for c in components if wanted in c.get('types', [])), None)
                if match:
                    address[field_name] = match.get('long_name')
                    break

        if not any(address.values()):
            return None
        return address
