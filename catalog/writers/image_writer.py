"""
Image writer: product images keyed by their stored media path
"""

from typing import Any, Dict, List
from sqlalchemy import select
import logging
import posixpath

from catalog.collaborators import MediaResolver
from catalog.writers.base import BaseWriter
from core.exceptions import AdapterError
from models import Image
from schemas.rows import ImageRow

logger = logging.getLogger(__name__)

MEDIA_DIRECTORY = "media/image/"


class ImageWriter(BaseWriter):

    section = "image"

    def __init__(self, db_session, media_resolver: MediaResolver):
        super().__init__(db_session)
        self.media_resolver = media_resolver

    async def write(self, product_id: int, main_number: str, rows: List[Dict[str, Any]]):
        """
        Upsert the images of a product.

        An existing image with the same path is updated. The product keeps
        exactly one main image: the last row flagged main wins, otherwise the
        first image by position.
        """
        if not rows:
            return

        main_image_id = None
        for row in self.validate_all(ImageRow, rows):
            path, extension = self._stored_path(main_number, row)

            image = await self.db.scalar(
                select(Image).where(Image.product_id == product_id, Image.path == path)
            )
            if image is None:
                image = Image(product_id=product_id, path=path, extension=extension)
                self.db.add(image)

            image.extension = extension
            if row.position is not None:
                image.position = row.position
            if row.description is not None:
                image.description = row.description
            if row.media_id is not None:
                image.media_id = row.media_id

            await self.db.flush()
            if row.is_main:
                main_image_id = image.id

        await self._ensure_single_main(product_id, main_image_id)
        logger.debug(f"Wrote {len(rows)} images for {main_number}")

    def _stored_path(self, main_number: str, row: ImageRow):
        source = row.image_url or row.path
        if not source:
            raise AdapterError(
                f"Image for {main_number} needs an imageUrl or a path",
                context={"order_number": main_number}
            )

        stored = self.media_resolver.normalize(source)
        if stored.startswith(MEDIA_DIRECTORY):
            stored = stored[len(MEDIA_DIRECTORY):]
        stored = stored.split("?", 1)[0]

        name, extension = posixpath.splitext(stored)
        return name, extension.lstrip(".") or "jpg"

    async def _ensure_single_main(self, product_id: int, main_image_id):
        images = (await self.db.execute(
            select(Image).where(Image.product_id == product_id).order_by(Image.position, Image.id)
        )).scalars().all()
        if not images:
            return

        if main_image_id is None:
            flagged = [image for image in images if image.main]
            main_image_id = flagged[0].id if flagged else images[0].id

        for image in images:
            image.main = image.id == main_image_id
        await self.db.flush()
