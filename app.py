import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from flask import Flask, current_app, request, jsonify

from core.config import load_settings
from core.errors import RentalError, ValidationError, AuthorizationError
from core.rental_desk import MotoRentalDesk
from models.booking import BookingStatus

logger = logging.getLogger(__name__)


def _desk() -> MotoRentalDesk:
    return current_app.extensions["rental_desk"]


def _customer_id() -> str:
    # Identity comes from the upstream auth layer
    customer_id = request.headers.get("X-Customer-Id", "").strip()
    if not customer_id:
        raise AuthorizationError("Missing customer identity")
    return customer_id


def _is_admin() -> bool:
    return request.headers.get("X-User-Role", "").strip().upper() == "ADMIN"


def _requester():
    # Admins act on any booking, so they need no customer id
    if _is_admin():
        return "", True
    return _customer_id(), False


def _require_admin():
    if not _is_admin():
        raise AuthorizationError("Admin role required")


def _payload() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _parse_date(value, field_name: str, required: bool = True):
    if value in (None, ""):
        if required:
            raise ValidationError(f"{field_name} is required")
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise ValidationError(f"{field_name} must be an ISO date") from e


def _parse_quantity(value) -> int:
    # Whole numbers only: 1.9 is rejected rather than truncated
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError("Quantity must be minimum 1")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError("Quantity must be minimum 1") from e


def _parse_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError("amount must be a number") from e
    if not amount.is_finite():
        raise ValidationError("amount must be a number")
    return amount


def _ok(data, message: str, status: int = 200):
    return jsonify({"success": True, "message": message, "data": data}), status


def create_app(desk: MotoRentalDesk = None) -> Flask:
    """Build the Flask app around a rental desk (a fresh one from settings if none is given)."""
    if desk is None:
        desk = MotoRentalDesk(load_settings())

    app = Flask(__name__)
    app.secret_key = desk.settings.secret_key
    app.extensions["rental_desk"] = desk

    @app.errorhandler(RentalError)
    def handle_rental_error(error: RentalError):
        logger.info("%s %s rejected: %s", request.method, request.path, error.message)
        body = {"success": False, "error": error.message}
        shortfall = getattr(error, "shortfall", None)
        if shortfall is not None:
            body["shortfall"] = str(shortfall)
        return jsonify(body), error.status_code

    @app.route('/health')
    def health():
        """Health check endpoint"""
        return jsonify({'status': 'ok', 'message': 'Motorcycle rental desk is running!'})

    # === Catalog ===
    @app.route('/motorcycles', methods=['GET'])
    def list_motorcycles():
        motorcycles = _desk().catalog_service.list_motorcycles()
        return _ok([m.to_dict() for m in motorcycles], "Motorcycles fetched successfully")

    @app.route('/motorcycles/<motorcycle_id>', methods=['GET'])
    def get_motorcycle(motorcycle_id):
        motorcycle = _desk().catalog_service.get_motorcycle(motorcycle_id)
        return _ok(motorcycle.to_dict(), "Motorcycle fetched successfully")

    # === Cart ===
    @app.route('/carts', methods=['GET'])
    def get_cart():
        cart = _desk().cart_service.get_cart(_customer_id())
        return _ok(cart.to_dict(), "Cart fetched successfully")

    @app.route('/carts', methods=['DELETE'])
    def clear_cart():
        cart = _desk().cart_service.clear_cart(_customer_id())
        return _ok(cart.to_dict(), "Cart has been cleared")

    @app.route('/carts/items', methods=['POST'])
    def add_cart_item():
        data = _payload()
        motorcycle_id = data.get("motorcycleId")
        if not motorcycle_id:
            raise ValidationError("motorcycleId is required")

        cart = _desk().cart_service.add_or_update_item(
            _customer_id(),
            motorcycle_id,
            quantity=_parse_quantity(data.get("quantity", 1)),
            pickup_date=_parse_date(data.get("pickupDate"), "pickupDate", required=False),
            return_date=_parse_date(data.get("returnDate"), "returnDate", required=False)
        )
        return _ok(cart.to_dict(), "Cart updated successfully")

    @app.route('/carts/items/<motorcycle_id>', methods=['DELETE'])
    def remove_cart_item(motorcycle_id):
        cart = _desk().cart_service.remove_item(_customer_id(), motorcycle_id)
        return _ok(cart.to_dict(), "Cart updated successfully")

    @app.route('/carts/coupon', methods=['POST'])
    def apply_coupon():
        promo_code = _payload().get("promoCode")
        if not promo_code or not isinstance(promo_code, str):
            raise ValidationError("promoCode is required")
        cart = _desk().cart_service.apply_coupon(_customer_id(), promo_code)
        return _ok(cart.to_dict(), f"Coupon applied. Discount: {cart.discount}")

    @app.route('/carts/coupon', methods=['DELETE'])
    def remove_coupon():
        cart = _desk().cart_service.remove_coupon(_customer_id())
        return _ok(cart.to_dict(), "Coupon removed")

    # === Bookings ===
    @app.route('/bookings', methods=['POST'])
    def create_booking():
        booking = _desk().booking_service.create_booking(_customer_id())
        return _ok(booking.to_dict(), "Booking created successfully", 201)

    @app.route('/bookings', methods=['GET'])
    def list_bookings():
        status = request.args.get("status")
        try:
            status = BookingStatus(status.upper()) if status else None
        except ValueError as e:
            raise ValidationError(f"Unknown booking status: {status}") from e

        # Customers only ever see their own bookings
        customer_id = request.args.get("customerId") if _is_admin() else _customer_id()
        bookings = _desk().booking_service.list_bookings(customer_id, status)
        return _ok([b.to_dict() for b in bookings], "Bookings fetched successfully")

    @app.route('/bookings/<booking_id>', methods=['GET'])
    def get_booking(booking_id):
        customer_id, is_admin = _requester()
        booking = _desk().booking_service.get_owned_booking(booking_id, customer_id, is_admin)
        return _ok(booking.to_dict(), "Booking fetched successfully")

    @app.route('/bookings/<booking_id>/cancellation-quote', methods=['GET'])
    def cancellation_quote(booking_id):
        customer_id, is_admin = _requester()
        quote = _desk().booking_service.quote_cancellation(booking_id, customer_id, is_admin)
        return _ok(quote.to_dict(), "Cancellation quote")

    @app.route('/bookings/<booking_id>', methods=['DELETE'])
    def cancel_booking(booking_id):
        customer_id, is_admin = _requester()
        booking = _desk().booking_service.cancel_booking(
            booking_id, customer_id, is_admin, _payload().get("cancellationReason")
        )
        return _ok(booking.to_dict(), "Booking cancelled successfully")

    @app.route('/bookings/<booking_id>/payment-due', methods=['GET'])
    def payment_due(booking_id):
        mode = request.args.get("mode", "full")
        customer_id, is_admin = _requester()
        _desk().booking_service.get_owned_booking(booking_id, customer_id, is_admin)
        amount = _desk().booking_service.payment_due(booking_id, mode)
        return _ok({"amount": str(amount), "mode": mode}, "Payment amount")

    @app.route('/bookings/<booking_id>/payments', methods=['POST'])
    def record_payment(booking_id):
        # Called by the payment provider integration once a capture is confirmed, never by customers
        _require_admin()
        amount = _parse_amount(_payload().get("amount"))
        booking = _desk().booking_service.record_payment(booking_id, amount)
        return _ok(booking.to_dict(), "Payment recorded")

    @app.route('/bookings/<booking_id>/status', methods=['PATCH'])
    def update_booking_status(booking_id):
        _require_admin()
        data = _payload()
        raw = str(data.get("status", "")).upper()
        try:
            status = BookingStatus(raw)
        except ValueError as e:
            allowed = ", ".join(s.value for s in BookingStatus)
            raise ValidationError(f"Status must be one of: {allowed}") from e
        booking = _desk().booking_service.update_status(
            booking_id, status, data.get("cancellationReason")
        )
        return _ok(booking.to_dict(), "Booking status changed successfully")

    # === Coupons (admin) ===
    @app.route('/coupons', methods=['POST'])
    def create_coupon():
        _require_admin()
        coupon = _desk().coupon_service.create_coupon(_payload())
        return _ok(coupon.to_dict(), "Coupon created successfully", 201)

    @app.route('/coupons', methods=['GET'])
    def list_coupons():
        _require_admin()
        active = request.args.get("active")
        active = None if active is None else active.lower() == "true"
        coupons = _desk().coupon_service.list_coupons(active)
        return _ok([c.to_dict() for c in coupons], "Coupons fetched successfully")

    @app.route('/coupons/<coupon_id>', methods=['GET'])
    def get_coupon(coupon_id):
        _require_admin()
        coupon = _desk().coupon_service.get_coupon(coupon_id)
        return _ok(coupon.to_dict(), "Coupon fetched successfully")

    @app.route('/coupons/<coupon_id>', methods=['PATCH'])
    def update_coupon(coupon_id):
        _require_admin()
        coupon = _desk().coupon_service.update_coupon(coupon_id, _payload())
        return _ok(coupon.to_dict(), "Coupon updated successfully")

    @app.route('/coupons/status/<coupon_id>', methods=['PATCH'])
    def update_coupon_status(coupon_id):
        _require_admin()
        is_active = _payload().get("isActive")
        if not isinstance(is_active, bool):
            raise ValidationError("isActive must be true or false")
        coupon = _desk().coupon_service.set_coupon_active(coupon_id, is_active)
        state = "active" if coupon.is_active else "inactive"
        return _ok(coupon.to_dict(), f"Promo-Code {coupon.promo_code} is {state}")

    @app.route('/coupons/<coupon_id>', methods=['DELETE'])
    def delete_coupon(coupon_id):
        _require_admin()
        _desk().coupon_service.delete_coupon(coupon_id)
        return _ok(None, "Coupon deleted successfully")

    return app


if __name__ == '__main__':
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    print("=== Motorcycle Rental Desk ===")
    print(f"Starting server on http://localhost:{settings.port}")
    print("Press Ctrl+C to stop")

    create_app(MotoRentalDesk(settings)).run(
        host='0.0.0.0',
        port=settings.port,
        debug=settings.debug
    )
