"""Ingestion pipeline — source adapters, normalization, deduplication and runs."""

from redactor.ingestion.registry import register_site
from redactor.ingestion.sites import (
    ap,
    biobio,
    ciper,
    cooperativa,
    df,
    efe,
    elciudadano,
    emol,
    latercera,
    reuters,
    soychile,
)

register_site("latercera", latercera.build_adapters)
register_site("emol", emol.build_adapters)
register_site("df", df.build_adapters)
register_site("ap", ap.build_adapters)
register_site("efe", efe.build_adapters)
register_site("reuters", reuters.build_adapters)
register_site("biobio", biobio.build_adapters)
register_site("cooperativa", cooperativa.build_adapters)
register_site("soychile", soychile.build_adapters)
register_site("elciudadano", elciudadano.build_adapters)
register_site("ciper", ciper.build_adapters)
