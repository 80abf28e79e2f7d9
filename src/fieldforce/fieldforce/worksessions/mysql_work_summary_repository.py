from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, integrity_as_conflict, transaction
from .model import ProductUsage, VoiceMeta, WorkSummary
from .repository import WorkSummaryRepository


class MySQLWorkSummaryRepository(WorkSummaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_session(self, session_id: int) -> Optional[WorkSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT summary_id, session_id, notes, voice_transcription, voice_translation,
                       voice_recording_url, created_at
                FROM work_summaries
                WHERE session_id=%s
                """,
                (int(session_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            cur.execute(
                "SELECT product_id, quantity, notes FROM work_summary_products WHERE summary_id=%s ORDER BY product_id",
                (int(r["summary_id"]),),
            )
            products = [
                ProductUsage(product_id=int(p["product_id"]), quantity=float(p["quantity"]), notes=p.get("notes"))
                for p in fetchall(cur)
            ]
            voice = None
            if r.get("voice_transcription") or r.get("voice_translation") or r.get("voice_recording_url"):
                voice = VoiceMeta(
                    transcription=r.get("voice_transcription"),
                    translation=r.get("voice_translation"),
                    recording_url=r.get("voice_recording_url"),
                )
            return WorkSummary(
                summary_id=int(r["summary_id"]),
                session_id=int(r["session_id"]),
                notes=r["notes"],
                created_at=r["created_at"],
                products=products,
                voice=voice,
            )

    def create(
        self,
        *,
        session_id: int,
        notes: str,
        products: Sequence[ProductUsage],
        voice: Optional[VoiceMeta],
        created_at: datetime,
    ) -> int:
        voice = voice or VoiceMeta()
        with integrity_as_conflict("A work summary already exists for this session"):
            with transaction(self._conn_factory):
                with db_cursor(self._conn_factory) as (_, cur):
                    cur.execute(
                        """
                        INSERT INTO work_summaries(session_id, notes, voice_transcription, voice_translation,
                                                   voice_recording_url, created_at)
                        VALUES(%s,%s,%s,%s,%s,%s)
                        """,
                        (
                            int(session_id),
                            notes,
                            voice.transcription,
                            voice.translation,
                            voice.recording_url,
                            created_at,
                        ),
                    )
                    summary_id = int(cur.lastrowid)
                    if products:
                        cur.executemany(
                            """
                            INSERT INTO work_summary_products(summary_id, product_id, quantity, notes)
                            VALUES(%s,%s,%s,%s)
                            """,
                            [(summary_id, int(p.product_id), p.quantity, p.notes) for p in products],
                        )
                    return summary_id
