"""
Networks app — сеть подсайтов на одном движке (path-based multi-site).

Подсайт создаётся как example.com/{slug}/. При создании админ может
отметить "Map this new site slug as a subdomain" — тогда сайт сразу
переезжает на {slug}.example.com (см. mapper.map_site_to_subdomain).
"""
