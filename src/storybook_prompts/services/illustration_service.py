"""
Illustration generation service.

Drives an image generator over a story's illustration prompts:
- Prompt enhancement and series style guidance
- Retries with linear backoff
- Batching with a pause between batches
- Themed placeholder images when generation fails
- Progress events for registered listeners

The image generator is any callable taking a prompt and returning an image
URL; it raises on failure. Listeners belong to the service instance.
"""

import logging
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    stop_after_attempt,
    wait_incrementing,
)

from ..config import Settings
from ..image_prompts import create_style_prompt, enhance_image_prompt

logger = logging.getLogger(__name__)

FALLBACK_IMAGE_TEMPLATE = "https://placehold.co/800x800/{bg}/{text}?text=Temporary+Illustration"

# (background, text) colours
DEFAULT_FALLBACK_COLORS = ("e0f2fe", "0284c7")
THEME_FALLBACK_COLORS: Dict[str, Tuple[str, str]] = {
    "adventure": ("fef3c7", "b45309"),
    "fantasy": ("f3e8ff", "7e22ce"),
    "space": ("e0e7ff", "4338ca"),
    "underwater": ("cffafe", "0e7490"),
    "dinosaurs": ("fef3c7", "92400e"),
}

# Per-image progress is spread over 10-90%
PREPARATION_PERCENT = 5.0
PROGRESS_START = 10.0
PROGRESS_SPAN = 80.0
PROMPT_PREVIEW_LENGTH = 50

ImageGenerator = Callable[[str], str]


class ImageStatus(str, Enum):
    """Outcome of a single image request."""
    SUCCESS = "success"
    FALLBACK = "fallback"


class ProgressStage(str, Enum):
    """Stage of a batch generation run."""
    PREPARATION = "preparation"
    GENERATION = "generation"
    PROCESSING = "processing"
    COMPLETE = "complete"


class IllustrationRequest(NamedTuple):
    """Prompt for the illustration of one paragraph."""
    paragraph_index: int
    prompt: str


@dataclass(frozen=True)
class GeneratedImage:
    url: str
    prompt: str
    status: ImageStatus

    @property
    def is_fallback(self) -> bool:
        return self.status == ImageStatus.FALLBACK


@dataclass(frozen=True)
class ImageGenerationProgress:
    """Progress event sent to listeners."""
    current_image: int
    total_images: int
    stage: ProgressStage
    image_status: ImageStatus
    percent_complete: float
    current_prompt: Optional[str] = None

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["stage"] = self.stage.value
        data["image_status"] = self.image_status.value
        return data


ProgressListener = Callable[[ImageGenerationProgress], None]


def get_fallback_image_url(theme: Optional[str] = None) -> str:
    """
    Placeholder image URL coloured for the story theme.

    Unknown or missing themes use the default colours.
    """
    bg, text = DEFAULT_FALLBACK_COLORS
    if theme:
        bg, text = THEME_FALLBACK_COLORS.get(theme.lower(), DEFAULT_FALLBACK_COLORS)
    return FALLBACK_IMAGE_TEMPLATE.format(bg=bg, text=text)


def _preview(prompt: str) -> str:
    return prompt[:PROMPT_PREVIEW_LENGTH] + "..."


def _percent(done: float, total: int) -> float:
    return (done / total) * PROGRESS_SPAN + PROGRESS_START


def _log_failed_attempt(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception()
    logger.error(
        f"Image generation attempt {retry_state.attempt_number} failed: {error}",
        exc_info=error,
    )


class IllustrationService:
    """Service for generating a story's illustrations."""

    def __init__(
        self,
        image_generator: ImageGenerator,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize illustration service.

        Args:
            image_generator: Callable returning an image URL for a prompt
            settings: Batching and retry settings (defaults if None)
            sleep: Delay function, replaceable in tests
        """
        settings = settings or Settings()
        self._image_generator = image_generator
        self._sleep = sleep
        self._listeners: List[ProgressListener] = []
        self.batch_size = settings.image_batch_size
        self.batch_delay = settings.image_batch_delay
        self.max_retries = settings.image_max_retries
        self.retry_delay = settings.image_retry_delay

    def add_progress_listener(self, callback: ProgressListener) -> Callable[[], None]:
        """
        Register a progress listener.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def _emit(self, progress: ImageGenerationProgress) -> None:
        for listener in list(self._listeners):
            try:
                listener(progress)
            except Exception:
                logger.error("Error in progress listener", exc_info=True)

    def get_fallback_image_url(self, theme: Optional[str] = None) -> str:
        return get_fallback_image_url(theme)

    def _request_image(self, prompt: str) -> str:
        logger.info(f"Generating image: \"{_preview(prompt)}\"")
        url = self._image_generator(prompt)
        if not url:
            raise ValueError("Image generator returned no URL")
        return url

    def _retrying(self) -> Retrying:
        """Retry policy: max_retries after the first attempt, linear backoff."""
        return Retrying(
            sleep=self._sleep,
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_incrementing(start=self.retry_delay, increment=self.retry_delay),
            after=_log_failed_attempt,
        )

    def generate_image(
        self,
        prompt: str,
        theme: Optional[str] = None,
        style_prompt: Optional[str] = None
    ) -> GeneratedImage:
        """
        Generate one image, retrying on failure.

        Args:
            prompt: Illustration prompt (enhanced before sending)
            theme: Story theme, used for the placeholder colours
            style_prompt: Series style guidance appended to the prompt

        Returns:
            GeneratedImage; status is "fallback" when every attempt failed
        """
        enhanced = enhance_image_prompt(prompt)
        if style_prompt:
            enhanced = f"{enhanced}\n\n{style_prompt}"

        try:
            url = self._retrying()(self._request_image, enhanced)
        except RetryError as e:
            logger.warning(
                f"Image generation failed after {e.last_attempt.attempt_number} attempts, "
                f"using fallback image"
            )
            return GeneratedImage(
                url=self.get_fallback_image_url(theme),
                prompt=prompt,
                status=ImageStatus.FALLBACK,
            )
        return GeneratedImage(url=url, prompt=prompt, status=ImageStatus.SUCCESS)

    def generate_images(
        self,
        requests: Sequence[Union[IllustrationRequest, str]],
        theme: Optional[str] = None,
        title: Optional[str] = None
    ) -> List[GeneratedImage]:
        """
        Generate images for a list of prompts in batches.

        Args:
            requests: IllustrationRequest items or plain prompt strings
            theme: Story theme (style guidance and placeholder colours)
            title: Story title; enables series style guidance

        Returns:
            One GeneratedImage per request, in request order
        """
        prompts = [r.prompt if isinstance(r, IllustrationRequest) else r for r in requests]
        total = len(prompts)
        style_prompt = create_style_prompt(title, theme) if title else None

        logger.info(f"Starting image generation for {total} images (theme: {theme or 'default'})")
        self._emit(ImageGenerationProgress(
            current_image=0,
            total_images=total,
            stage=ProgressStage.PREPARATION,
            image_status=ImageStatus.SUCCESS,
            percent_complete=PREPARATION_PERCENT,
        ))

        start_time = time.time()
        images: List[GeneratedImage] = []
        for batch_start in range(0, total, self.batch_size):
            if batch_start > 0:
                self._sleep(self.batch_delay)
            batch = prompts[batch_start:batch_start + self.batch_size]
            logger.debug(
                f"Processing batch {batch_start // self.batch_size + 1} with {len(batch)} images"
            )

            for offset, prompt in enumerate(batch):
                index = batch_start + offset
                self._emit(ImageGenerationProgress(
                    current_image=index + 1,
                    total_images=total,
                    stage=ProgressStage.GENERATION,
                    image_status=ImageStatus.SUCCESS,
                    percent_complete=_percent(index, total),
                    current_prompt=_preview(prompt),
                ))

                image = self.generate_image(prompt, theme=theme, style_prompt=style_prompt)
                images.append(image)

                self._emit(ImageGenerationProgress(
                    current_image=index + 1,
                    total_images=total,
                    stage=ProgressStage.PROCESSING,
                    image_status=image.status,
                    percent_complete=_percent(index + 1, total),
                    current_prompt=_preview(prompt),
                ))

        fallback_count = sum(1 for image in images if image.is_fallback)
        self._emit(ImageGenerationProgress(
            current_image=total,
            total_images=total,
            stage=ProgressStage.COMPLETE,
            image_status=ImageStatus.FALLBACK if fallback_count else ImageStatus.SUCCESS,
            percent_complete=100.0,
        ))

        duration = time.time() - start_time
        logger.info(
            f"Generated {total - fallback_count}/{total} images in {duration:.1f}s "
            f"({fallback_count} fallback)"
        )
        return images
