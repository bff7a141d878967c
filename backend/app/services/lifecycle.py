# app/services/lifecycle.py
"""
Prompt lifecycle: status state machine and the generation work queue.

    queued ──> generating ──> done
                         └──> failed
    (created with images) ──> done

done and failed are terminal. Every transition is a conditional UPDATE guarded by
the expected current status, so a late writer can never move a prompt backwards.
"""
import asyncio
import logging

from tortoise import timezone

from app.core.errors import UpstreamError
from app.models.prompt import Prompt, PromptStatus
from app.services.generation import ImageGenerator
from app.services.images import ImageManager

logger = logging.getLogger("uvicorn.error")

ALLOWED_TRANSITIONS: dict[PromptStatus, frozenset[PromptStatus]] = {
    PromptStatus.QUEUED: frozenset({PromptStatus.GENERATING}),
    PromptStatus.GENERATING: frozenset({PromptStatus.DONE, PromptStatus.FAILED}),
    PromptStatus.DONE: frozenset(),
    PromptStatus.FAILED: frozenset(),
}

TERMINAL_STATES = frozenset({PromptStatus.DONE, PromptStatus.FAILED})


def initial_status(image_ids: list) -> PromptStatus:
    """Prompts submitted with images are already complete; others wait for generation."""
    return PromptStatus.DONE if image_ids else PromptStatus.QUEUED


def can_transition(current: PromptStatus, target: PromptStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


async def transition(prompt_id, current: PromptStatus, target: PromptStatus, **changes) -> bool:
    """
    Atomically move a prompt from current to target, applying extra field changes.

    Returns:
        True when the row was updated; False when the prompt no longer exists or
        another writer already moved it out of current.

    Raises:
        ValueError: current -> target is not an edge of the state machine
    """
    if not can_transition(current, target):
        raise ValueError(f"illegal prompt transition {current.value} -> {target.value}")
    updated = await Prompt.filter(id=prompt_id, status=current).update(
        status=target, updated_at=timezone.now(), **changes
    )
    if not updated:
        logger.info("[lifecycle] prompt %s: %s -> %s skipped (status changed or prompt deleted)",
                    prompt_id, current.value, target.value)
        return False
    logger.info("[lifecycle] prompt %s: %s -> %s", prompt_id, current.value, target.value)
    return True


class GenerationQueue:
    """
    Runs one generation task per queued prompt on the running event loop.

    submit() returns the asyncio.Task so callers (tests, shutdown) can await or
    cancel it; no timeout is applied to the generator itself.
    """

    def __init__(self, generator: ImageGenerator, images: ImageManager,
                 delay_seconds: float = 1.0, generated_folder: str | None = None):
        self.generator = generator
        self.images = images
        self.delay_seconds = delay_seconds
        self.generated_folder = generated_folder
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, prompt_id, prompt_text: str, count: int = 1, size: str = "1024x1024") -> asyncio.Task:
        key = str(prompt_id)
        task = asyncio.create_task(self._run(prompt_id, prompt_text, count, size), name=f"generate-{key}")
        self._tasks[key] = task
        task.add_done_callback(lambda t, k=key: self._forget(k, t))
        return task

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]

    def task_for(self, prompt_id) -> asyncio.Task | None:
        return self._tasks.get(str(prompt_id))

    async def wait(self, prompt_id, timeout: float | None = None) -> None:
        """Wait for the prompt's generation task, if one is still running."""
        task = self.task_for(prompt_id)
        if task is not None:
            await asyncio.wait_for(asyncio.shield(task), timeout)

    async def drain(self) -> None:
        """Wait for every submitted task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel whatever is still pending; prompts keep their last committed status."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("[lifecycle] cancelled %d pending generation task(s)", len(tasks))
        self._tasks.clear()

    async def _discard(self, prompt_id, image_ids: list[str]) -> None:
        """Remove images stored before the run failed; nothing will reference them."""
        for image_id in image_ids:
            try:
                await self.images.delete(image_id)
            except Exception:
                logger.error("[lifecycle] could not discard image %s of failed prompt %s",
                             image_id, prompt_id, exc_info=True)

    async def _run(self, prompt_id, prompt_text: str, count: int, size: str) -> PromptStatus | None:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        if not await transition(prompt_id, PromptStatus.QUEUED, PromptStatus.GENERATING):
            return None

        new_ids = []
        try:
            outputs = await self.generator.generate(prompt_text, count=count, size=size)
            for out in outputs:
                data = out.image_bytes if out.image_bytes is not None else out.image_url
                img = await self.images.create(data, filename=f"{prompt_id}.png", folder=self.generated_folder)
                new_ids.append(str(img.id))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if isinstance(exc, UpstreamError):
                logger.error("[lifecycle] generation failed for prompt %s: %s | %s",
                             prompt_id, exc.message, exc.context)
            else:
                logger.exception("[lifecycle] generation failed for prompt %s", prompt_id)
            await self._discard(prompt_id, new_ids)
            await transition(prompt_id, PromptStatus.GENERATING, PromptStatus.FAILED)
            return PromptStatus.FAILED

        changes = {}
        if new_ids:
            prompt = await Prompt.get_or_none(id=prompt_id)
            if prompt is None:
                return None
            changes["image_ids"] = list(prompt.image_ids or []) + new_ids
        if await transition(prompt_id, PromptStatus.GENERATING, PromptStatus.DONE, **changes):
            return PromptStatus.DONE
        return None
