# spotlight_data_client/documents/reindex.py

import logging

from spotlight_data_client.documents.solr_document import SolrDocumentFinder
from spotlight_data_client.exceptions import DataClientError
from spotlight_data_client.models.tagging import TagRemoved
from spotlight_data_client.repositories.tags.tag_ledger import TagLedger

logger = logging.getLogger(__name__)


class ReindexTrigger:
    """
    Подписчик TagLedger: после удаления связи тега переиндексирует документ,
    чтобы поле тегов выставки в индексе не осталось устаревшим.
    Мутация тегов к этому моменту уже зафиксирована, поэтому ошибка записи
    в индекс только логируется.
    """

    def __init__(self, ledger: TagLedger, finder: SolrDocumentFinder):
        self._finder = finder
        ledger.subscribe(self.on_tag_removed)

    async def on_tag_removed(self, event: TagRemoved):
        logger.debug(
            "Tag '%s' removed from %s by exhibit %s", event.tag_name, event.taggable_id, event.tagger_id
        )
        try:
            await self._finder.reindex(event.taggable_id)
        except DataClientError:
            logger.exception("Reindex after tag removal failed for %s", event.taggable_id)
