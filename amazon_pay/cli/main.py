def main():
    # config profiles need to be loaded before amazon_pay.config is imported
    from .profiles import set_profile_from_sys_argv

    set_profile_from_sys_argv()

    from .amazon_pay import amazon_pay

    amazon_pay()


if __name__ == "__main__":
    main()
