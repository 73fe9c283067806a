"""Canonical composer names and lookup helpers."""

from __future__ import annotations

import unicodedata
from typing import Dict, Optional, Tuple

# Canonical "Surname, Firstname" form mapped to the lowercase spellings
# seen in tags and album titles.
_COMPOSERS: Dict[str, Tuple[str, ...]] = {
    "Bach, Johann Sebastian": (
        "bach", "bach, j.s.", "bach, j.s", "bach, johann sebastian",
        "j.s. bach", "johann sebastian bach",
    ),
    "Bach, Carl Philipp Emanuel": ("bach, c.p.e.", "bach, c.p.e", "c.p.e. bach"),
    "Bach, Wilhelm Friedemann": ("bach, w.f.",),
    "Bach, Johann Christian": ("bach, j.c.",),
    "Mozart, Wolfgang Amadeus": (
        "mozart", "mozart, w.a.", "mozart, wolfgang amadeus",
        "wolfgang amadeus mozart", "w.a. mozart",
    ),
    "Beethoven, Ludwig van": ("beethoven", "beethoven, ludwig van", "ludwig van beethoven"),
    "Vivaldi, Antonio": ("vivaldi", "vivaldi, antonio", "antonio vivaldi"),
    "Handel, George Frideric": (
        "handel", "handel, george frideric", "handel, g.f.", "george frideric handel",
    ),
    "Haydn, Joseph": ("haydn", "haydn, joseph", "joseph haydn"),
    "Brahms, Johannes": ("brahms", "brahms, johannes", "johannes brahms"),
    "Schubert, Franz": ("schubert", "schubert, franz", "franz schubert"),
    "Schumann, Robert": ("schumann", "schumann, robert", "robert schumann"),
    "Chopin, Frédéric": ("chopin", "chopin, frédéric", "chopin, frederic", "frédéric chopin"),
    "Liszt, Franz": ("liszt", "liszt, franz", "franz liszt"),
    "Wagner, Richard": ("wagner", "wagner, richard", "richard wagner"),
    "Verdi, Giuseppe": ("verdi", "verdi, giuseppe", "giuseppe verdi"),
    "Puccini, Giacomo": ("puccini", "puccini, giacomo", "giacomo puccini"),
    "Tchaikovsky, Pyotr Ilyich": (
        "tchaikovsky", "tchaikovsky, pyotr ilyich", "pyotr ilyich tchaikovsky",
    ),
    "Rachmaninoff, Sergei": (
        "rachmaninoff", "rachmaninoff, sergei", "sergei rachmaninoff", "rachmaninov",
    ),
    "Debussy, Claude": ("debussy", "debussy, claude", "claude debussy"),
    "Ravel, Maurice": ("ravel", "ravel, maurice", "maurice ravel"),
    "Strauss, Richard": ("strauss, richard", "richard strauss", "r. strauss", "r.strauss"),
    "Strauss, Johann II": ("strauss, johann", "johann strauss"),
    "Mahler, Gustav": ("mahler", "mahler, gustav", "gustav mahler"),
    "Shostakovich, Dmitri": ("shostakovich", "shostakovich, dmitri", "dmitri shostakovich"),
    "Stravinsky, Igor": ("stravinsky", "stravinsky, igor", "igor stravinsky"),
    "Prokofiev, Sergei": ("prokofiev", "prokofiev, sergei", "sergei prokofiev"),
    "Bartók, Béla": ("bartok", "bartók", "bartok, bela", "bartók, béla", "béla bartók"),
    "Dvořák, Antonín": ("dvorak", "dvorak, antonin"),
    "Monteverdi, Claudio": ("monteverdi", "monteverdi, claudio", "claudio monteverdi"),
    "Purcell, Henry": ("purcell", "purcell, henry", "henry purcell"),
    "Corelli, Arcangelo": ("corelli", "corelli, arcangelo", "arcangelo corelli"),
    "Telemann, Georg Philipp": (
        "telemann", "telemann, georg philipp", "georg philipp telemann",
    ),
    "Rameau, Jean-Philippe": ("rameau", "rameau, jean-philippe", "jean-philippe rameau"),
    "Lully, Jean-Baptiste": ("lully", "lully, jean-baptiste", "jean-baptiste lully"),
    "Couperin, François": ("couperin", "couperin, françois", "françois couperin"),
    "Pergolesi, Giovanni Battista": (
        "pergolesi", "pergolesi, giovanni battista", "giovanni battista pergolesi",
    ),
    "Scarlatti, Domenico": ("scarlatti", "scarlatti, domenico", "domenico scarlatti"),
    "Boccherini, Luigi": ("boccherini", "boccherini, luigi", "luigi boccherini"),
    "Rossini, Gioachino": ("rossini", "rossini, gioachino", "gioachino rossini"),
    "Donizetti, Gaetano": ("donizetti", "donizetti, gaetano", "gaetano donizetti"),
    "Bellini, Vincenzo": ("bellini", "bellini, vincenzo", "vincenzo bellini"),
    "Bizet, Georges": ("bizet", "bizet, georges", "georges bizet"),
    "Gounod, Charles": ("gounod", "gounod, charles", "charles gounod"),
    "Massenet, Jules": ("massenet", "massenet, jules", "jules massenet"),
    "Gluck, Christoph Willibald": (
        "gluck", "gluck, christoph willibald", "christoph willibald gluck",
    ),
    "Charpentier, Marc-Antoine": (
        "charpentier", "charpentier, marc-antoine", "marc-antoine charpentier",
    ),
    "Berlioz, Hector": ("berlioz", "berlioz, hector", "hector berlioz"),
    "Bruckner, Anton": ("bruckner", "bruckner, anton", "anton bruckner"),
    "Sibelius, Jean": ("sibelius", "sibelius, jean", "jean sibelius"),
    "Grieg, Edvard": ("grieg", "grieg, edvard", "edvard grieg"),
    "Mendelssohn, Felix": ("mendelssohn", "mendelssohn, felix", "felix mendelssohn"),
    "Saint-Saëns, Camille": ("saint-saëns", "saint-saens", "camille saint-saëns"),
    "Fauré, Gabriel": ("fauré", "faure", "gabriel fauré"),
    "Elgar, Edward": ("elgar", "elgar, edward", "edward elgar"),
    "Vaughan Williams, Ralph": ("vaughan williams", "ralph vaughan williams"),
    "Holst, Gustav": ("holst", "holst, gustav", "gustav holst"),
    "Byrd, William": ("byrd", "byrd, william", "william byrd"),
    "Palestrina, Giovanni Pierluigi da": ("palestrina", "giovanni pierluigi da palestrina"),
    "Tallis, Thomas": ("tallis", "tallis, thomas", "thomas tallis"),
    "Bernstein, Leonard": ("bernstein", "bernstein, leonard", "leonard bernstein"),
    "Copland, Aaron": ("copland", "copland, aaron", "aaron copland"),
    "Gershwin, George": ("gershwin", "gershwin, george", "george gershwin"),
    "Britten, Benjamin": ("britten", "britten, benjamin", "benjamin britten"),
}

COMPOSER_FULL_NAMES: Dict[str, str] = {
    alias: canonical for canonical, aliases in _COMPOSERS.items() for alias in aliases
}

# Surnames used when picking a composer out of a comma separated artist credit.
FAMOUS_COMPOSER_SURNAMES = ("vivaldi", "bach", "mozart", "beethoven", "bizet", "verdi", "puccini")


def remove_diacritics(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def lookup_composer(name: str) -> Optional[str]:
    """Canonical name for ``name`` (exact, then accent-insensitive), if known."""
    normalized = name.lower().strip()
    if normalized in COMPOSER_FULL_NAMES:
        return COMPOSER_FULL_NAMES[normalized]
    return COMPOSER_FULL_NAMES.get(remove_diacritics(normalized))


def is_known_composer(name: str) -> bool:
    return lookup_composer(name) is not None


def normalize_composer_name(name: str) -> str:
    return lookup_composer(name) or name.strip()


def known_surnames() -> Tuple[str, ...]:
    """Lowercase surnames of every canonical entry, longest first."""
    surnames = {canonical.split(",", 1)[0].strip().lower() for canonical in _COMPOSERS}
    return tuple(sorted(surnames, key=len, reverse=True))
