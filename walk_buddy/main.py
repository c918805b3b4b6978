# walk_buddy/main.py

import argparse
import threading
import time
from typing import Callable, Optional

from walk_buddy import config
from walk_buddy.controller import StrobeController
from walk_buddy.gpio_devices import BuzzerAlarm, GpioTorch, SimulatedAlarm, SimulatedTorch
from walk_buddy.mqtt_gateway import MqttGateway
from walk_buddy.scheduler import ThreadScheduler
from walk_buddy.settings_store import SettingsStore
from walk_buddy.sms import LoggingMessageSender, ModemMessageSender, MqttMessageSender
from web.server import create_app


def dispatch_command(
    controller: StrobeController,
    path: str,
    payload: object,
    logger: Callable[[str], None] = print,
) -> None:
    """Map a remote ``cmd/<path>`` message onto a controller operation."""
    obj = payload if isinstance(payload, dict) else {}

    if path == "flash/toggle":
        controller.toggle_flash()
        return

    if path == "flash/speed":
        seconds = obj.get("seconds", payload)
        controller.set_flash_speed(seconds)
        return

    if path == "display_flash":
        on = obj.get("on")
        if isinstance(on, bool):
            controller.set_display_flash_enabled(on)
        return

    if path == "panic":
        # "on" is optional; when given, only toggle if it differs.
        on = obj.get("on")
        if isinstance(on, bool) and on == controller.state.panic_active:
            return
        controller.toggle_panic_mode()
        return

    logger(f"[MQTT] Unknown command {path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="walk-buddy")
    parser.add_argument("--mode", choices=["gpio", "sim"], default="gpio")
    parser.add_argument("--sender", choices=["modem", "mqtt", "log"], default="modem")
    parser.add_argument("--host", default=config.WEB_HOST)
    parser.add_argument("--port", type=int, default=config.WEB_PORT)
    parser.add_argument("--mqtt", action="store_true", default=config.MQTT_ENABLED)
    return parser


def main(argv: Optional[list] = None) -> None:
    args = build_parser().parse_args(argv)

    gpio = None
    if args.mode == "gpio":
        import RPi.GPIO as GPIO

        GPIO.setwarnings(False)
        GPIO.setmode(GPIO.BCM)
        gpio = GPIO
        torch = GpioTorch(config.TORCH_PIN, gpio=gpio)
        alarm = BuzzerAlarm(config.BUZZER_PIN, gpio=gpio)
    else:
        torch = SimulatedTorch()
        alarm = SimulatedAlarm()
    torch.setup()
    alarm.setup()

    settings = SettingsStore(config.SETTINGS_PATH)
    scheduler = ThreadScheduler()

    controller: Optional[StrobeController] = None

    def on_mqtt_command(path: str, payload: object) -> None:
        if controller is not None:
            dispatch_command(controller, path, payload)

    mqtt: Optional[MqttGateway] = None
    if args.mqtt or args.sender == "mqtt":
        mqtt = MqttGateway(
            host=config.MQTT_HOST,
            port=config.MQTT_PORT,
            keepalive_sec=config.MQTT_KEEPALIVE_SEC,
            base_topic=config.MQTT_BASE_TOPIC,
            on_command=on_mqtt_command,
        )

    if args.sender == "modem":
        sender = ModemMessageSender(config.MODEM_PORT, config.MODEM_BAUDRATE)
    elif args.sender == "mqtt":
        sender = MqttMessageSender(mqtt)
    else:
        sender = LoggingMessageSender()

    controller = StrobeController(torch, alarm, sender, settings, scheduler)

    if mqtt is not None:
        mqtt.start()

        def mqtt_state_loop() -> None:
            while True:
                mqtt.publish_state(controller.snapshot())
                time.sleep(config.MQTT_STATE_INTERVAL_SEC)

        threading.Thread(target=mqtt_state_loop, name="MQTT_STATE", daemon=True).start()

    app = create_app(controller, settings)

    print(f"[MAIN] Running ({args.mode}, sender={args.sender}).")
    print(f"[MAIN] Open http://<device-ip>:{args.port} in your browser.")

    try:
        app.run(host=args.host, port=args.port, debug=False, use_reloader=False, threaded=True)
    except KeyboardInterrupt:
        pass
    finally:
        controller.shutdown()
        if mqtt is not None:
            mqtt.stop()
        if gpio is not None:
            gpio.cleanup()
        print("[MAIN] Stopped.")


if __name__ == "__main__":
    main()
