"""Basic usage example for omni-ocr."""

import asyncio
from pathlib import Path

from omni_ocr import (
    CancellationToken,
    OcrCompletedEventArgs,
    PatternConfig,
    RecognitionOptions,
    get_default,
    setup_logging,
)


def on_completed(sender, args: OcrCompletedEventArgs):
    if args.is_successful:
        print(f"[event] Recognized {len(args.result.lines)} lines")
    else:
        print(f"[event] Recognition failed: {args.error_message}")


async def main():
    """Demonstrate direct and event-driven recognition."""

    # Level and file come from OMNI_OCR_LOG_LEVEL / OMNI_OCR_LOG_FILE
    setup_logging()

    # The default service picks the native engine for this platform
    service = get_default()
    await service.init_async()
    print(f"Engine: {service.adapter.engine.name}")
    print(f"Supported languages: {', '.join(service.supported_languages)}")

    source = Path("path/to/your/invoice.png")
    if not source.exists():
        print(f"Image not found: {source}")
        return

    image_bytes = source.read_bytes()

    # Fast profile
    print("\nRecognizing (fast)...")
    result = await service.recognize_async(image_bytes)
    print(result.all_text)

    # Accurate profile with extraction rules
    print("\nRecognizing (accurate) with patterns...")
    options = (
        RecognitionOptions.builder()
        .set_try_hard(True)
        .add_pattern_config(PatternConfig(r"INV-\d{4,}"))
        .add_pattern_config(
            PatternConfig(r"\d+\.\d{2}", validation_function=lambda value: float(value) > 0)
        )
        .set_custom_callback(lambda text: print(f"Callback saw {len(text)} characters") or True)
        .build()
    )
    cancellation = CancellationToken()
    result = await service.recognize_async(image_bytes, options, cancellation)
    print(f"Matched values: {result.matched_values}")
    for element in result.elements[:5]:
        print(f"  {element.text!r} conf={element.confidence:.2f} at ({element.x}, {element.y})")

    # Event-driven recognition never raises on failure
    print("\nEvent-driven recognition...")
    service.recognition_completed.once(on_completed)
    await service.start_recognize_async(b"not an image")


if __name__ == "__main__":
    asyncio.run(main())
