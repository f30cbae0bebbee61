import base64
import logging
import time
from relay import __version__, PROTOCOL_VERSION
from relay.blobs import BlobStore, StagedBlob
from relay.records import *
from relay.rpc.errors import *
from relay.rpc.params import *

logger = logging.getLogger(__name__)

class RelayService:
    """The operations of the relay, on top of the blob store and the record index.
    
    Uploads follow one policy for consignments and media: the first write for a key wins, 
    an identical replay is a no-op that returns False, and a diverging replay is rejected.
    Acks follow the same policy for the ack decision of a consignment."""

    def __init__(self, blob_store:BlobStore, record_index:RecordIndex):
        self.blob_store = blob_store
        self.record_index = record_index
        self._started_at = time.monotonic()

    def uptime(self) -> int:
        return int(time.monotonic() - self._started_at)

    async def server_info(self, args:NoArgs) -> dict:
        return {
            "protocol_version": PROTOCOL_VERSION,
            "version": __version__,
            "uptime": self.uptime(),
        }

    #=========================================================
    # Consignments
    #=========================================================
    async def get_consignment(self, args:RecipientArgs) -> dict:
        record:ConsignmentRecord = await self.record_index.find(Namespace.CONSIGNMENTS, args.recipient_id)
        if record is None:
            raise NotFoundConsignment({"recipient_id": args.recipient_id})
        data = await self.blob_store.load(record.digest)
        result = {
            "consignment": base64.b64encode(data).decode('ascii'),
            "txid": record.txid,
        }
        if record.vout is not None:
            result["vout"] = record.vout
        return result

    async def post_consignment(self, args:ConsignmentPostArgs, upload:StagedBlob) -> bool:
        return await self._upload(
            Namespace.CONSIGNMENTS,
            args.recipient_id,
            upload,
            lambda digest: new_consignment(args.recipient_id, digest, args.txid, args.vout),
            {"recipient_id": args.recipient_id})

    #=========================================================
    # Media
    #=========================================================
    async def get_media(self, args:AttachmentArgs) -> str:
        record:MediaRecord = await self.record_index.find(Namespace.MEDIA, args.attachment_id)
        if record is None:
            raise NotFoundMedia({"attachment_id": args.attachment_id})
        data = await self.blob_store.load(record.digest)
        return base64.b64encode(data).decode('ascii')

    async def post_media(self, args:AttachmentArgs, upload:StagedBlob) -> bool:
        return await self._upload(
            Namespace.MEDIA,
            args.attachment_id,
            upload,
            lambda digest: new_media(args.attachment_id, digest),
            {"attachment_id": args.attachment_id})

    #=========================================================
    # Acks
    #=========================================================
    async def get_ack(self, args:RecipientArgs) -> bool | None:
        record:ConsignmentRecord = await self.record_index.find(Namespace.CONSIGNMENTS, args.recipient_id)
        if record is None:
            raise NotFoundConsignment({"recipient_id": args.recipient_id})
        return record.ack

    async def post_ack(self, args:AckPostArgs) -> bool:
        try:
            changed = await self.record_index.set_ack(args.recipient_id, args.ack)
        except RecordNotFound:
            raise NotFoundConsignment({"recipient_id": args.recipient_id}) from None
        except AckConflict as e:
            raise CannotChangeAck({"recipient_id": args.recipient_id, "ack": e.current}) from None
        if changed:
            logger.info(f"Consignment '{args.recipient_id}' {ack_state(args.ack).value}")
        return changed

    #=========================================================
    # Shared upload algorithm
    #=========================================================
    async def _upload(self, namespace:Namespace, key:str, upload:StagedBlob, make_record, error_data:dict) -> bool:
        existing = await self.record_index.find(namespace, key)
        if existing is None:
            digest = await self.blob_store.commit(upload)
            try:
                await self.record_index.insert(make_record(digest))
                logger.info(f"Stored {namespace.value} '{key}' as blob {digest} ({upload.size} bytes)")
                return True
            except RecordExists as e:
                #another upload for the same key got in first, it decides
                existing = e.existing
        if existing.digest == upload.blob_id:
            logger.debug(f"Replay of {namespace.value} '{key}', nothing changed")
            return False
        raise CannotChangeUploadedFile(error_data)
