"""
List pipeline wiring.

Built once by create_app() from the loaded corpus and kept in
app.extensions['filterlists']. Every component receives the same immutable
corpus; nothing here is mutated while serving.
"""
from dataclasses import dataclass

from filterlists.config import MAIN_DOMAIN
from filterlists.filters.corpus import FilterCorpus
from filterlists.services.access import AccessResolver
from filterlists.services.bans import BanRegistry
from filterlists.services.materializer import ListMaterializer
from filterlists.services.metrics import DownloadMetrics


@dataclass(frozen=True)
class ListPipeline:
    corpus: FilterCorpus
    resolver: AccessResolver
    materializer: ListMaterializer
    metrics: DownloadMetrics


def build_pipeline(corpus, redis_client, domain=MAIN_DOMAIN, bans=None):
    return ListPipeline(
        corpus=corpus,
        resolver=AccessResolver(corpus, bans or BanRegistry()),
        materializer=ListMaterializer(corpus, domain),
        metrics=DownloadMetrics(redis_client),
    )
