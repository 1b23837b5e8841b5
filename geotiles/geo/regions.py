"""
Fetch Regions and Cities

Rectangular regions queried for the global lithology layer, regions used
for the latitude biome estimate, and the city list for fine city grids.
"""

from dataclasses import dataclass
from typing import List, Optional

from .grid import AreaBoundary

# Regions with reasonable upstream coverage, processed in this order
FETCH_REGIONS: List[AreaBoundary] = [
    AreaBoundary("North America", north=55, south=25, east=-60, west=-130),
    AreaBoundary("Europe", north=65, south=35, east=45, west=-10),
    AreaBoundary("East Asia", north=50, south=20, east=150, west=100),
    AreaBoundary("South America", north=15, south=-55, east=-30, west=-85),
    AreaBoundary("Africa", north=38, south=-35, east=55, west=-20),
    AreaBoundary("Australia", north=-10, south=-45, east=155, west=110),
    AreaBoundary("Southeast Asia", north=25, south=-10, east=130, west=90),
    AreaBoundary("India", north=35, south=5, east=100, west=65),
]

# Land regions covered by the latitude biome estimate
BIOME_ESTIMATE_REGIONS: List[AreaBoundary] = [
    AreaBoundary("North America", north=70, south=25, east=-50, west=-170),
    AreaBoundary("Europe", north=72, south=35, east=50, west=-25),
    AreaBoundary("Asia", north=75, south=5, east=180, west=50),
    AreaBoundary("Africa", north=38, south=-35, east=55, west=-20),
    AreaBoundary("South America", north=15, south=-55, east=-30, west=-85),
    AreaBoundary("Australia", north=-10, south=-45, east=155, west=110),
]


@dataclass(frozen=True)
class City:
    """A city that gets a fine-precision grid"""
    name: str
    country: str
    lat: float
    lng: float
    population: int  # approximate, used for prioritization


CITIES: List[City] = [
    City("New York", "USA", 40.7128, -74.006, 8336000),
    City("Los Angeles", "USA", 34.0522, -118.2437, 3979000),
    City("Chicago", "USA", 41.8781, -87.6298, 2693000),
    City("Houston", "USA", 29.7604, -95.3698, 2320000),
    City("Phoenix", "USA", 33.4484, -112.074, 1680000),
    City("Philadelphia", "USA", 39.9526, -75.1652, 1584000),
    City("San Antonio", "USA", 29.4241, -98.4936, 1547000),
    City("San Diego", "USA", 32.7157, -117.1611, 1423000),
    City("Dallas", "USA", 32.7767, -96.797, 1341000),
    City("San Jose", "USA", 37.3382, -121.8863, 1027000),
    City("Austin", "USA", 30.2672, -97.7431, 978000),
    City("Jacksonville", "USA", 30.3322, -81.6557, 911000),
    City("Fort Worth", "USA", 32.7555, -97.3308, 909000),
    City("Columbus", "USA", 39.9612, -82.9988, 898000),
    City("San Francisco", "USA", 37.7749, -122.4194, 874000),
    City("Indianapolis", "USA", 39.7684, -86.1581, 876000),
    City("Charlotte", "USA", 35.2271, -80.8431, 885000),
    City("Seattle", "USA", 47.6062, -122.3321, 737000),
    City("Denver", "USA", 39.7392, -104.9903, 727000),
    City("Washington DC", "USA", 38.9072, -77.0369, 705000),
    City("Boston", "USA", 42.3601, -71.0589, 685000),
    City("Nashville", "USA", 36.1627, -86.7816, 692000),
    City("Detroit", "USA", 42.3314, -83.0458, 639000),
    City("Portland", "USA", 45.5152, -122.6784, 654000),
    City("Memphis", "USA", 35.1495, -90.049, 651000),
    City("Las Vegas", "USA", 36.1699, -115.1398, 644000),
    City("Baltimore", "USA", 39.2904, -76.6122, 586000),
    City("Milwaukee", "USA", 43.0389, -87.9065, 577000),
    City("Albuquerque", "USA", 35.0844, -106.6504, 562000),
    City("Tucson", "USA", 32.2226, -110.9747, 548000),
    City("Miami", "USA", 25.7617, -80.1918, 467000),
    City("Atlanta", "USA", 33.749, -84.388, 498000),
    City("Minneapolis", "USA", 44.9778, -93.265, 429000),
    City("Cleveland", "USA", 41.4993, -81.6944, 373000),
    City("New Orleans", "USA", 29.9511, -90.0715, 391000),
    City("Tampa", "USA", 27.9506, -82.4572, 399000),
    City("Pittsburgh", "USA", 40.4406, -79.9959, 302000),
    City("Cincinnati", "USA", 39.1031, -84.512, 309000),
    City("Kansas City", "USA", 39.0997, -94.5786, 508000),
    City("St Louis", "USA", 38.627, -90.1994, 302000),
    City("Salt Lake City", "USA", 40.7608, -111.891, 200000),
    City("Toronto", "Canada", 43.6532, -79.3832, 2930000),
    City("Montreal", "Canada", 45.5017, -73.5673, 1780000),
    City("Vancouver", "Canada", 49.2827, -123.1207, 675000),
    City("Calgary", "Canada", 51.0447, -114.0719, 1336000),
    City("Edmonton", "Canada", 53.5461, -113.4938, 1010000),
    City("Ottawa", "Canada", 45.4215, -75.6972, 1017000),
    City("Winnipeg", "Canada", 49.8951, -97.1384, 749000),
    City("Quebec City", "Canada", 46.8139, -71.208, 542000),
    City("Mexico City", "Mexico", 19.4326, -99.1332, 21900000),
    City("Guadalajara", "Mexico", 20.6597, -103.3496, 5268000),
    City("Monterrey", "Mexico", 25.6866, -100.3161, 5119000),
    City("Puebla", "Mexico", 19.0414, -98.2063, 3199000),
    City("Tijuana", "Mexico", 32.5149, -117.0382, 2157000),
    City("Leon", "Mexico", 21.1221, -101.6859, 1721000),
    City("São Paulo", "Brazil", -23.5505, -46.6333, 22400000),
    City("Rio de Janeiro", "Brazil", -22.9068, -43.1729, 13500000),
    City("Brasilia", "Brazil", -15.7942, -47.8822, 4803000),
    City("Salvador", "Brazil", -12.9714, -38.5014, 4018000),
    City("Fortaleza", "Brazil", -3.7172, -38.5433, 4055000),
    City("Belo Horizonte", "Brazil", -19.9191, -43.9386, 5110000),
    City("Manaus", "Brazil", -3.1019, -60.025, 2220000),
    City("Curitiba", "Brazil", -25.4284, -49.2733, 3615000),
    City("Recife", "Brazil", -8.0476, -34.877, 4078000),
    City("Porto Alegre", "Brazil", -30.0346, -51.2177, 4272000),
    City("Cordoba", "Argentina", -31.4201, -64.1888, 1613000),
    City("Rosario", "Argentina", -32.9442, -60.6505, 1350000),
    City("Mendoza", "Argentina", -32.8895, -68.8458, 1000000),
    City("Bogotá", "Colombia", 4.711, -74.0721, 10700000),
    City("Medellin", "Colombia", 6.2518, -75.5636, 4020000),
    City("Cali", "Colombia", 3.4516, -76.532, 2880000),
    City("Barranquilla", "Colombia", 10.9639, -74.7964, 2370000),
    City("Lima", "Peru", -12.0464, -77.0428, 11100000),
    City("Arequipa", "Peru", -16.409, -71.5375, 1080000),
    City("Santiago", "Chile", -33.4489, -70.6693, 6680000),
    City("Valparaiso", "Chile", -33.0472, -71.6127, 980000),
    City("Caracas", "Venezuela", 10.4806, -66.9036, 2940000),
    City("Maracaibo", "Venezuela", 10.6427, -71.6125, 2220000),
    City("Quito", "Ecuador", -0.1807, -78.4678, 2780000),
    City("Guayaquil", "Ecuador", -2.1894, -79.8891, 2890000),
    City("Montevideo", "Uruguay", -34.9011, -56.1645, 1870000),
    City("Asuncion", "Paraguay", -25.2637, -57.5759, 2970000),
    City("La Paz", "Bolivia", -16.5, -68.15, 2000000),
    City("London", "UK", 51.5074, -0.1278, 9000000),
    City("Paris", "France", 48.8566, 2.3522, 11000000),
    City("Madrid", "Spain", 40.4168, -3.7038, 6642000),
    City("Barcelona", "Spain", 41.3874, 2.1686, 5575000),
    City("Rome", "Italy", 41.9028, 12.4964, 4342000),
    City("Milan", "Italy", 45.4642, 9.19, 3140000),
    City("Naples", "Italy", 40.8518, 14.2681, 2180000),
    City("Berlin", "Germany", 52.52, 13.405, 3645000),
    City("Munich", "Germany", 48.1351, 11.582, 1472000),
    City("Hamburg", "Germany", 53.5511, 9.9937, 1899000),
    City("Frankfurt", "Germany", 50.1109, 8.6821, 753000),
    City("Amsterdam", "Netherlands", 52.3676, 4.9041, 872000),
    City("Brussels", "Belgium", 50.8503, 4.3517, 1209000),
    City("Lisbon", "Portugal", 38.7223, -9.1393, 2900000),
    City("Vienna", "Austria", 48.2082, 16.3738, 1897000),
    City("Zurich", "Switzerland", 47.3769, 8.5417, 434000),
    City("Geneva", "Switzerland", 46.2044, 6.1432, 500000),
    City("Stockholm", "Sweden", 59.3293, 18.0686, 975000),
    City("Copenhagen", "Denmark", 55.6761, 12.5683, 1336000),
    City("Oslo", "Norway", 59.9139, 10.7522, 698000),
    City("Helsinki", "Finland", 60.1699, 24.9384, 656000),
    City("Dublin", "Ireland", 53.3498, -6.2603, 1388000),
    City("Moscow", "Russia", 55.7558, 37.6173, 12500000),
    City("St Petersburg", "Russia", 59.9343, 30.3351, 5380000),
    City("Warsaw", "Poland", 52.2297, 21.0122, 1790000),
    City("Krakow", "Poland", 50.0647, 19.945, 780000),
    City("Prague", "Czechia", 50.0755, 14.4378, 1309000),
    City("Budapest", "Hungary", 47.4979, 19.0402, 1756000),
    City("Bucharest", "Romania", 44.4268, 26.1025, 2130000),
    City("Sofia", "Bulgaria", 42.6977, 23.3219, 1268000),
    City("Belgrade", "Serbia", 44.7866, 20.4489, 1375000),
    City("Zagreb", "Croatia", 45.815, 15.9819, 804000),
    City("Athens", "Greece", 37.9838, 23.7275, 3154000),
    City("Istanbul", "Turkey", 41.0082, 28.9784, 15460000),
    City("Ankara", "Turkey", 39.9334, 32.8597, 5663000),
    City("Valencia", "Spain", 39.4699, -0.3763, 1600000),
    City("Seville", "Spain", 37.3891, -5.9845, 1100000),
    City("Cairo", "Egypt", 30.0444, 31.2357, 21300000),
    City("Lagos", "Nigeria", 6.5244, 3.3792, 15400000),
    City("Kinshasa", "DRC", -4.4419, 15.2663, 14970000),
    City("Cape Town", "South Africa", -33.9249, 18.4241, 4618000),
    City("Durban", "South Africa", -29.8587, 31.0218, 3720000),
    City("Nairobi", "Kenya", -1.2921, 36.8219, 4920000),
    City("Casablanca", "Morocco", 33.5731, -7.5898, 3710000),
    City("Algiers", "Algeria", 36.7538, 3.0588, 3335000),
    City("Addis Ababa", "Ethiopia", 9.0054, 38.7636, 5006000),
    City("Dar es Salaam", "Tanzania", -6.7924, 39.2083, 6702000),
    City("Accra", "Ghana", 5.6037, -0.187, 4200000),
    City("Abidjan", "Ivory Coast", 5.3097, -4.0127, 5200000),
    City("Khartoum", "Sudan", 15.5007, 32.5599, 5829000),
    City("Alexandria", "Egypt", 31.2001, 29.9187, 5200000),
    City("Tunis", "Tunisia", 36.8065, 10.1815, 2790000),
    City("Dakar", "Senegal", 14.7167, -17.4677, 3938000),
    City("Kampala", "Uganda", 0.3476, 32.5825, 3470000),
    City("Lusaka", "Zambia", -15.3875, 28.3228, 2906000),
    City("Harare", "Zimbabwe", -17.8252, 31.0335, 2123000),
    City("Tokyo", "Japan", 35.6762, 139.6503, 37400000),
    City("Osaka", "Japan", 34.6937, 135.5023, 19300000),
    City("Seoul", "South Korea", 37.5665, 126.978, 9776000),
    City("Beijing", "China", 39.9042, 116.4074, 21540000),
    City("Shanghai", "China", 31.2304, 121.4737, 27060000),
    City("Hong Kong", "China", 22.3193, 114.1694, 7500000),
    City("Taipei", "Taiwan", 25.033, 121.5654, 2646000),
    City("Manila", "Philippines", 14.5995, 120.9842, 13920000),
    City("Bangkok", "Thailand", 13.7563, 100.5018, 10539000),
    City("Singapore", "Singapore", 1.3521, 103.8198, 5686000),
    City("Jakarta", "Indonesia", -6.2088, 106.8456, 34540000),
    City("Kuala Lumpur", "Malaysia", 3.139, 101.6869, 8285000),
    City("Hanoi", "Vietnam", 21.0278, 105.8342, 8054000),
    City("Mumbai", "India", 19.076, 72.8777, 20411000),
    City("Delhi", "India", 28.6139, 77.209, 31181000),
    City("Bangalore", "India", 12.9716, 77.5946, 12327000),
    City("Kolkata", "India", 22.5726, 88.3639, 14850000),
    City("Chennai", "India", 13.0827, 80.2707, 11235000),
    City("Karachi", "Pakistan", 24.8607, 67.0011, 16094000),
    City("Lahore", "Pakistan", 31.5204, 74.3587, 12642000),
    City("Dhaka", "Bangladesh", 23.8103, 90.4125, 21741000),
    City("Dubai", "UAE", 25.2048, 55.2708, 3478000),
    City("Tel Aviv", "Israel", 32.0853, 34.7818, 4150000),
    City("Tehran", "Iran", 35.6892, 51.389, 9135000),
    City("Sydney", "Australia", -33.8688, 151.2093, 5312000),
    City("Melbourne", "Australia", -37.8136, 144.9631, 5078000),
    City("Brisbane", "Australia", -27.4698, 153.0251, 2514000),
    City("Perth", "Australia", -31.9505, 115.8605, 2085000),
    City("Adelaide", "Australia", -34.9285, 138.6007, 1359000),
    City("Auckland", "New Zealand", -36.8509, 174.7645, 1657000),
    City("Wellington", "New Zealand", -41.2865, 174.7762, 418000),
    City("Gold Coast", "Australia", -28.0167, 153.4, 679000),
    City("Canberra", "Australia", -35.2809, 149.13, 453000),
    City("Hobart", "Australia", -42.8821, 147.3272, 232000),
    City("Buenos Aires", "Argentina", -34.6037, -58.3816, 15000000),
    City("Johannesburg", "South Africa", -26.2041, 28.0473, 5783000),
    City("Ho Chi Minh City", "Vietnam", 10.8231, 106.6297, 9050000),
]

_CITIES_BY_NAME = {c.name: c for c in CITIES}

# Cities checked by the coverage quality gate, in priority order
MAJOR_CITIES: List[City] = [
    _CITIES_BY_NAME[name]
    for name in (
        "New York", "Los Angeles", "Chicago", "Houston", "London",
        "Paris", "Berlin", "Tokyo", "Sydney", "São Paulo",
        "Toronto", "Mexico City", "Madrid", "Rome", "Amsterdam",
        "San Francisco", "Seattle", "Denver", "Boston", "Miami",
    )
]


def get_cities_by_population(limit: Optional[int] = None) -> List[City]:
    """Cities sorted by population, largest first, optionally truncated."""
    ordered = sorted(CITIES, key=lambda c: c.population, reverse=True)
    return ordered[:limit] if limit else ordered
