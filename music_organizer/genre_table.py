"""Keyword table used by the genre mapper.

Entries are matched in declaration order, so the order below is the
tie-break when a tag matches more than one entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .models import MainGenre


@dataclass(frozen=True)
class GenreMapping:
    main_genre: MainGenre
    subgenre: str
    keywords: Tuple[str, ...]


GENRE_MAPPINGS: Tuple[GenreMapping, ...] = (
    GenreMapping(
        MainGenre.ALTERNATIVE,
        "",
        (
            "alternative", "alternative rock", "indie", "indie rock",
            "post-punk", "post punk", "gothic rock", "gothic", "goth rock",
            "new wave", "darkwave", "dark wave", "shoegaze",
            "dream pop", "ethereal", "coldwave",
            "indie pop", "indie folk", "chamber pop",
            "lo-fi", "lo fi", "bedroom pop", "jangle pop",
        ),
    ),
    GenreMapping(
        MainGenre.ROCK,
        "",
        (
            "rock", "classic rock", "hard rock", "blues rock",
            "southern rock", "arena rock", "album rock",
            "70s rock", "80s rock", "rock and roll", "rock & roll", "rock n roll",
            "punk", "punk rock", "hardcore", "hardcore punk",
            "post-hardcore", "skate punk", "street punk",
            "oi!", "oi", "anarcho-punk",
            "metal", "heavy metal", "death metal", "black metal",
            "doom metal", "doom", "sludge", "stoner metal", "stoner rock",
            "thrash metal", "thrash", "speed metal", "power metal",
            "progressive metal", "metalcore", "deathcore", "grindcore",
            "progressive rock", "prog rock", "prog", "art rock",
            "psychedelic rock", "psychedelic", "space rock",
            "krautrock", "experimental rock",
            "glam rock", "glam metal", "hair metal",
            "sleaze rock", "cock rock",
        ),
    ),
    GenreMapping(
        MainGenre.ELECTRONIC,
        "",
        (
            "electronic", "electronica", "idm", "intelligent dance music",
            "breakbeat", "breaks", "glitch", "downtempo",
            "trip hop", "trip-hop", "chillout", "chill out",
            "synthwave", "vaporwave", "future bass",
            "ambient", "dark ambient", "drone", "drone ambient",
            "atmospheric", "soundscape", "field recording", "lowercase",
            "lowercase sound", "musique concrète", "concrete music",
            "industrial", "ebm", "electronic body music", "power electronics",
            "harsh noise", "noise", "industrial techno", "industrial metal",
            "aggrotech", "dark electro", "electro-industrial",
        ),
    ),
    GenreMapping(
        MainGenre.DANCE,
        "",
        (
            "house", "deep house", "tech house", "progressive house",
            "electro house", "acid house", "chicago house", "detroit house",
            "future house", "bass house",
            "techno", "minimal techno", "detroit techno", "berlin techno",
            "hard techno", "acid techno", "dub techno",
            "drum and bass", "drum & bass", "dnb", "d&b", "jungle",
            "liquid funk", "neurofunk", "jump up",
            "dubstep", "brostep", "post-dubstep", "future garage",
            "bass music", "uk bass",
            "trance", "progressive trance", "uplifting trance",
            "psytrance", "psychedelic trance", "goa trance",
            "vocal trance", "hard trance",
        ),
    ),
    GenreMapping(
        MainGenre.URBAN,
        "",
        (
            "hip hop", "hip-hop", "rap", "hip hop/rap",
            "gangsta rap", "conscious rap", "alternative hip hop",
            "underground hip hop", "boom bap", "east coast hip hop",
            "west coast hip hop", "southern hip hop",
            "trap", "trap music", "drill", "mumble rap",
            "r&b", "r & b", "rnb", "rhythm and blues",
            "contemporary r&b", "alternative r&b", "neo-soul",
            "soul", "northern soul", "southern soul",
            "motown", "classic soul", "deep soul",
            "funk", "p-funk", "g-funk", "funk rock",
            "funk metal", "electro funk",
        ),
    ),
    GenreMapping(
        MainGenre.JAZZ,
        "",
        (
            "jazz", "bebop", "hard bop", "cool jazz", "modal jazz",
            "free jazz", "avant-garde jazz", "smooth jazz",
            "contemporary jazz", "jazz fusion", "acid jazz",
            "nu jazz", "post-bop",
            "fusion", "jazz-rock", "jazz rock",
        ),
    ),
    GenreMapping(
        MainGenre.BLUES,
        "",
        (
            "blues", "delta blues", "chicago blues", "electric blues",
            "acoustic blues", "country blues", "texas blues",
        ),
    ),
    GenreMapping(
        MainGenre.WORLD_FOLK,
        "",
        (
            "folk", "folk music", "contemporary folk", "folk rock",
            "acoustic folk", "traditional folk", "american folk",
            "british folk", "irish folk", "scottish folk",
            "world", "world music", "ethnic", "traditional",
            "african", "asian", "latin", "middle eastern",
            "oriental", "tribal", "indigenous",
            "singer-songwriter", "singer/songwriter", "songwriter",
            "acoustic", "acoustic pop",
            "country", "country music", "country rock", "alt-country",
            "alternative country", "bluegrass", "americana",
            "outlaw country", "honky tonk",
            "celtic", "celtic music", "celtic folk",
        ),
    ),
    GenreMapping(
        MainGenre.POP,
        "",
        (
            "pop", "pop music", "synth-pop", "synth pop", "synthpop",
            "electropop", "electro-pop", "dance-pop", "dance pop",
            "bubblegum pop", "teen pop", "power pop",
            "art pop", "baroque pop", "experimental pop",
        ),
    ),
    GenreMapping(
        MainGenre.CLASSICAL,
        "",
        (
            "classical", "classical music", "baroque", "romantic",
            "renaissance", "early music", "medieval", "opera",
            "orchestral", "symphonic", "chamber music", "choral",
            "modern classical", "contemporary classical", "neoclassical",
        ),
    ),
    GenreMapping(
        MainGenre.SOUNDTRACKS,
        "",
        (
            "soundtrack", "original soundtrack", "film score",
            "original score", "motion picture score", "film soundtrack",
            "video game music", "game soundtrack", "stage & screen",
            "musical", "show tunes",
        ),
    ),
)
