"""SukeNyaa: scrape, filter and cache nyaa-style torrent listings."""

__version__ = "1.0.0"
