"""
case_data.py
============
Bundled city catalog for "Where in the World is Nadine Vuan?".

The catalog uses the same JSON shape the catalog loader reads from disk or
over HTTP, so this module doubles as the reference example of that format:

    {"game_data": {"cities": [ {id, name, country, is_final, clues,
                                informant, not_here_response,
                                final_encounter?}, ... ]}}

Clues listed under a city describe THAT city; the informant of the city
visited just before it hands them out.

To ship a different trail:
    1. Point CATALOG_SOURCE at a JSON file or URL with the same shape, or
       replace DEFAULT_GAME_DATA below.
    2. Keep exactly one city with "is_final": true and at least four others.
"""

from __future__ import annotations

from typing import Dict, List


def _city(
    city_id: str,
    name: str,
    country: str,
    difficult: List[str],
    medium: List[str],
    easy: List[str],
    informant: str,
    greeting: str,
    not_here: str,
    is_final: bool = False,
) -> Dict:
    return {
        "id": city_id,
        "name": name,
        "country": country,
        "is_final": is_final,
        "clues": {"difficult": difficult, "medium": medium, "easy": easy},
        "informant": {
            "name": informant,
            "greeting": greeting,
            "farewell_helpful": "Good luck, detective. I hope you catch up with her.",
            "farewell_unhelpful": "Sorry I could not be of more help. Safe travels.",
        },
        "not_here_response": not_here,
    }


_CITIES: List[Dict] = [
    _city(
        "paris", "Paris", "France",
        difficult=[
            "She asked how long the queue is for the glass pyramid.",
            "She was reading about a wrought-iron tower built for a world fair in 1889.",
        ],
        medium=[
            "She wanted to practise her croissant order before the trip.",
            "She said she would walk along the Seine at dusk.",
        ],
        easy=[
            "She was heading to the French capital.",
            "She bought a ticket to see the Eiffel Tower.",
        ],
        informant="Amélie",
        greeting="Bonjour! You look like someone on a trail.",
        not_here="Non, nobody like that has passed through Paris.",
    ),
    _city(
        "tokyo", "Tokyo", "Japan",
        difficult=[
            "She asked about the busiest pedestrian crossing in the world.",
            "She was studying a rail map with a loop line painted green.",
        ],
        medium=[
            "She wanted to try sushi at a famous fish market.",
            "She said she would see cherry blossoms in Ueno Park.",
        ],
        easy=[
            "She was flying to the capital of Japan.",
            "She changed her money into yen.",
        ],
        informant="Kenji",
        greeting="Konnichiwa. I have been expecting a visitor.",
        not_here="I am sorry, she never came to Tokyo.",
    ),
    _city(
        "cairo", "Cairo", "Egypt",
        difficult=[
            "She asked how far the Giza plateau is from the city centre.",
            "She was reading about the only surviving wonder of the ancient world.",
        ],
        medium=[
            "She wanted to cruise on the Nile.",
            "She asked about the Khan el-Khalili bazaar.",
        ],
        easy=[
            "She was going to see the pyramids.",
            "She changed her money into Egyptian pounds.",
        ],
        informant="Yasmin",
        greeting="Ahlan! Sit, have some tea.",
        not_here="No traveller like that has been in Cairo.",
    ),
    _city(
        "sydney", "Sydney", "Australia",
        difficult=[
            "She asked about a harbour bridge locals call the Coathanger.",
            "She was reading about an opera house shaped like sails.",
        ],
        medium=[
            "She wanted to surf at Bondi Beach.",
            "She said she would climb the harbour bridge.",
        ],
        easy=[
            "She was heading down under.",
            "She changed her money into Australian dollars.",
        ],
        informant="Liam",
        greeting="G'day! What brings you all this way?",
        not_here="Nah mate, she never turned up in Sydney.",
    ),
    _city(
        "new_york", "New York", "United States",
        difficult=[
            "She asked about a park designed by Olmsted and Vaux in 1858.",
            "She was reading about a copper statue gifted by France.",
        ],
        medium=[
            "She wanted to see a show on Broadway.",
            "She said she would cross the Brooklyn Bridge on foot.",
        ],
        easy=[
            "She was heading to the Big Apple.",
            "She bought a ticket to the top of the Empire State Building.",
        ],
        informant="Marcus",
        greeting="Hey there. Make it quick, this city never sleeps.",
        not_here="Nope, never seen her in New York.",
    ),
    _city(
        "rome", "Rome", "Italy",
        difficult=[
            "She asked where to throw a coin so she would return.",
            "She was reading about an amphitheatre that held fifty thousand people.",
        ],
        medium=[
            "She wanted to visit the smallest country in the world inside the city.",
            "She asked for the best carbonara near the Pantheon.",
        ],
        easy=[
            "She was heading to the Italian capital.",
            "She bought a ticket for the Colosseum.",
        ],
        informant="Giulia",
        greeting="Ciao! Another detective in the Eternal City?",
        not_here="Mi dispiace, she was never in Rome.",
    ),
    _city(
        "mumbai", "Mumbai", "India",
        difficult=[
            "She asked about a gateway arch built for a royal visit in 1911.",
            "She was reading about lunchbox couriers called dabbawalas.",
        ],
        medium=[
            "She wanted to walk Marine Drive at night.",
            "She asked about film studios in Bollywood.",
        ],
        easy=[
            "She was heading to the biggest city in India.",
            "She changed her money into rupees.",
        ],
        informant="Priya",
        greeting="Namaste! You have come a long way.",
        not_here="No, she has not been seen in Mumbai.",
    ),
    _city(
        "rio", "Rio de Janeiro", "Brazil",
        difficult=[
            "She asked how to reach a statue with open arms above the city.",
            "She was reading about a cable car up Sugarloaf Mountain.",
        ],
        medium=[
            "She wanted to dance samba at Carnival.",
            "She said she would sunbathe at Copacabana.",
        ],
        easy=[
            "She was heading to Brazil.",
            "She changed her money into reais.",
        ],
        informant="Thiago",
        greeting="Olá! Welcome to the marvellous city.",
        not_here="Não, she never came to Rio.",
    ),
    _city(
        "moscow", "Moscow", "Russia",
        difficult=[
            "She asked about a cathedral with colourful onion domes.",
            "She was reading about metro stations decorated like palaces.",
        ],
        medium=[
            "She wanted to see the ballet at the Bolshoi.",
            "She packed a fur hat for a cold winter.",
        ],
        easy=[
            "She was heading to the Russian capital.",
            "She changed her money into roubles.",
        ],
        informant="Dmitri",
        greeting="Privet. Few visitors come asking questions.",
        not_here="Nyet, she was never in Moscow.",
    ),
    _city(
        "cape_town", "Cape Town", "South Africa",
        difficult=[
            "She asked how to get to a flat-topped mountain above the bay.",
            "She was reading about the island where Mandela was held.",
        ],
        medium=[
            "She wanted to see penguins at Boulders Beach.",
            "She said she would drive to the Cape of Good Hope.",
        ],
        easy=[
            "She was heading to South Africa.",
            "She changed her money into rand.",
        ],
        informant="Naledi",
        greeting="Sawubona! The wind brought you here.",
        not_here="No, she never passed through Cape Town.",
    ),
]

_BUENOS_AIRES: Dict = _city(
    "buenos_aires", "Buenos Aires", "Argentina",
    difficult=[
        "She asked about the widest avenue in the world, with an obelisk in the middle.",
        "She was reading about colourful houses in La Boca.",
    ],
    medium=[
        "She wanted to learn the tango.",
        "She asked where to find the best steak and malbec.",
    ],
    easy=[
        "She was heading to Argentina.",
        "She changed her money into pesos.",
    ],
    informant="Sofía",
    greeting="¡Hola! You are very close now.",
    not_here="She is not here... yet.",
    is_final=True,
)
_BUENOS_AIRES["final_encounter"] = {
    "nadine_speech": (
        "You found me! I left that trail of clues across the world hoping "
        "someone clever enough would follow it."
    ),
    "steve_response": (
        "Nadine, you had everyone worried. Next time, maybe just send a postcard."
    ),
    "victory_message": (
        "Case closed! You tracked Nadine Vuan all the way to Buenos Aires."
    ),
}


DEFAULT_GAME_DATA: Dict = {"game_data": {"cities": _CITIES + [_BUENOS_AIRES]}}
"""
Bundled catalog: ten non-final cities plus Buenos Aires as the final city.
Used whenever CATALOG_SOURCE is not set.
"""
