"""Closed reference sets offered to the user when defining a report.

Theme and tone identifiers are the keys the prompt composer understands; the
client groups mirror the agency's account structure.
"""

CLIENT_GROUPS: list[dict] = [
    {
        "type": "Client SP",
        "clients": [
            {"id": "betmgm", "name": "BetMGM"},
            {"id": "braskem", "name": "Braskem"},
            {"id": "pagbank", "name": "PagBank"},
            {"id": "mrv", "name": "MRV"},
            {"id": "nio", "name": "NIO"},
        ],
    },
    {
        "type": "Client RJ",
        "clients": [
            {"id": "globo", "name": "Globo / G1 / Gshow"},
            {"id": "petrobras", "name": "Petrobras / BR"},
            {"id": "oi", "name": "Oi"},
            {"id": "bobs", "name": "Bob's"},
        ],
    },
    {
        "type": "Client DF",
        "clients": [
            {"id": "govfed", "name": "Federal Government / Sebrae / Banco do Brasil"},
        ],
    },
    {
        "type": "Dreamers Unit",
        "clients": [
            {"id": "dreamfactory", "name": "Dream Factory"},
            {"id": "convert", "name": "Convert+Performance"},
            {"id": "alab", "name": "A-LAB / NDAR / +Xou"},
        ],
    },
]

THEMES: list[str] = [
    "Growth Strategy",
    "Brand Awareness",
    "Market Analysis",
    "Media Planning",
    "Social Media Analysis",
    "Performance Report (Post-Campaign)",
    "Branding & Positioning",
    "Competitor Analysis",
]

TONES: list[str] = ["Analytical", "Strategic", "Executive", "Technical", "Persuasive", "Creative"]

IMAGE_STYLE_PRESETS: list[str] = ["Photorealistic", "Illustration", "Line Art", "Minimalist", "Abstract"]

DEFAULT_TONE = "Analytical"


def resolve_client_name(client_id: str) -> str:
    """Display name for a client id; unknown ids are used as-is."""
    for group in CLIENT_GROUPS:
        for client in group["clients"]:
            if client["id"] == client_id:
                return client["name"]
    return client_id
